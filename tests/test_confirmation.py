from storefront.confirmation import DeleteConfirmation


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_single_activation_only_arms():
    c = DeleteConfirmation()
    assert c.is_idle
    assert c.activate(7) is False
    assert c.armed_id == 7


def test_second_activation_on_same_row_fires_and_disarms():
    c = DeleteConfirmation()
    c.activate(7)
    assert c.activate(7) is True
    assert c.is_idle


def test_activation_on_other_row_moves_armed_state():
    c = DeleteConfirmation()
    c.activate(7)
    assert c.activate(8) is False
    assert c.armed_id == 8
    # 7 must be armed again from scratch
    assert c.activate(7) is False
    assert c.activate(7) is True


def test_reset():
    c = DeleteConfirmation()
    c.activate(1)
    c.reset()
    assert c.is_idle
    assert c.activate(1) is False


def test_state_round_trip():
    clock = FakeClock()
    c = DeleteConfirmation(clock=clock)
    c.activate(3)
    restored = DeleteConfirmation.from_state(c.to_state(), clock=clock)
    assert restored.armed_id == 3
    assert restored.activate(3) is True
    assert restored.to_state() is None
    assert DeleteConfirmation.from_state(None).is_idle


def test_timeout_expires_armed_state():
    clock = FakeClock()
    c = DeleteConfirmation(timeout=30, clock=clock)
    c.activate(5)
    clock.now += 10
    assert c.armed_id == 5
    clock.now += 30
    assert c.is_idle
    # An expired arm does not fire; it re-arms.
    assert c.activate(5) is False
    assert c.activate(5) is True


def test_no_timeout_never_expires():
    clock = FakeClock()
    c = DeleteConfirmation(clock=clock)
    c.activate(5)
    clock.now += 10 ** 6
    assert c.armed_id == 5
