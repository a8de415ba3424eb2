"""Admin resource pages.

Every page follows the same cycle: fetch everything, render the generic table
(and the modal when open), perform one collaborator call on a POST, then
redirect back to the list so the next render re-fetches. Failures are logged
and swallowed at this boundary.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from markupsafe import Markup

from . import services
from .client import ServiceClient, ServiceError, get_api
from .descriptors import Column, FormField, Option, build_form, build_table, collect_submission
from .session import BrowserSession, get_session
from .templating import templates
from .utils import format_price

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin")


# -------------------- cell renderers --------------------

def fallback(text: str) -> Callable[[Any, Any], str]:
    def render(value, record):
        return str(value) if value else text
    return render


def badge(text: str, tone: str) -> Markup:
    return Markup('<span class="badge badge-{}">{}</span>').format(tone, text)


def render_active(value, record):
    return badge("Active", "ok") if value == 1 else badge("Inactive", "bad")


def render_price(value, record):
    return format_price(value)


def render_stock(value, record):
    value = value or 0
    tone = "ok" if value > 10 else "warn" if value > 0 else "bad"
    return badge(f"{value} units", tone)


def render_excerpt(value, record, length: int = 50):
    value = value or ""
    return value[:length] + ("..." if len(value) > length else "")


def render_stars(value, record):
    value = value or 0
    stars = "".join(
        Markup('<span class="star{}">&#9733;</span>').format(" filled" if n <= value else "")
        for n in range(1, 6)
    )
    return Markup('<span class="stars" title="{} of 5">{}</span>').format(value, Markup(stars))


def render_order_status(value, record):
    tone = {"COMPLETED": "ok", "PROCESSING": "warn"}.get(value, "bad")
    return badge(value or "PENDING", tone)


def render_date(value, record):
    return value.date().isoformat() if value else "N/A"


def render_item_count(value, record):
    return f"{len(value or [])} items"


def next_order_status(status: Optional[str]) -> str:
    return "PROCESSING" if status == "PAYMENT_EXPECTED" else "COMPLETED"


# -------------------- page definitions --------------------

class PageData(NamedTuple):
    records: Sequence[Any]
    users: Sequence[Any] = ()
    products: Sequence[Any] = ()


@dataclass
class ResourcePage:
    slug: str
    title: str
    singular: str
    columns: List[Column]
    load: Callable[[ServiceClient], PageData]
    fields: Optional[Callable[[PageData, bool], List[FormField]]] = None
    create: Optional[Callable[[ServiceClient, Dict[str, Any]], Any]] = None
    update: Optional[Callable[[ServiceClient, int, Dict[str, Any]], Any]] = None
    advance: Optional[Callable[[ServiceClient, Any], Any]] = None
    delete: Optional[Callable[[ServiceClient, int], Any]] = None
    empty_hint: Optional[str] = None

    @property
    def can_edit(self) -> bool:
        return self.update is not None or self.advance is not None


def user_fields(data: PageData, editing: bool) -> List[FormField]:
    return [
        FormField("userName", "Username", required=True),
        FormField("userPassword", "Password", required=not editing),
        FormField("userDetails.firstName", "First Name"),
        FormField("userDetails.lastName", "Last Name"),
        FormField("userDetails.email", "Email", kind="email"),
        FormField("userDetails.phoneNumber", "Phone"),
        FormField("active", "Status", kind="select", options=[Option(1, "Active"), Option(0, "Inactive")]),
    ]


def product_fields(data: PageData, editing: bool) -> List[FormField]:
    return [
        FormField("productName", "Product Name", required=True),
        FormField("price", "Price", kind="number", required=True),
        FormField("category", "Category", required=True),
        FormField("availability", "Stock Quantity", kind="number", required=True),
        FormField("discription", "Description", kind="textarea"),
    ]


def recommendation_fields(data: PageData, editing: bool) -> List[FormField]:
    return [
        FormField("userId", "User", kind="select", required=True, options=[Option(u.id, u.user_name) for u in data.users]),
        FormField("productId", "Product", kind="select", required=True, options=[Option(p.id, p.product_name) for p in data.products]),
        FormField(
            "rating", "Rating", kind="select", required=True,
            options=[Option(n, f"{n} Star" if n == 1 else f"{n} Stars") for n in range(1, 6)],
        ),
    ]


def create_recommendation(api: ServiceClient, values: Dict[str, Any]):
    try:
        user_id, product_id, rating = int(values["userId"]), int(values["productId"]), int(values["rating"])
    except (KeyError, ValueError) as e:
        raise ServiceError("incomplete recommendation form") from e
    return services.create_recommendation(api, user_id, product_id, rating)


def advance_order(api: ServiceClient, order) -> Any:
    return services.update_order_status(api, order.id, next_order_status(order.status))


def load_recommendations(api: ServiceClient) -> PageData:
    # All three succeed or the page shows nothing.
    return PageData(
        records=services.list_recommendations(api),
        users=services.list_users(api),
        products=services.list_products(api),
    )


PAGES: Dict[str, ResourcePage] = {
    page.slug: page
    for page in [
        ResourcePage(
            slug="users",
            title="Users Management",
            singular="User",
            columns=[
                Column("id", "ID"),
                Column("user_name", "Username"),
                Column("user_details.email", "Email", render=fallback("N/A")),
                Column("user_details.first_name", "First Name", render=fallback("N/A")),
                Column("user_details.last_name", "Last Name", render=fallback("N/A")),
                Column("role.role_name", "Role", render=fallback("USER")),
                Column("active", "Status", render=render_active),
            ],
            load=lambda api: PageData(services.list_users(api)),
            fields=user_fields,
            create=services.create_user,
            update=services.update_user,
            delete=services.delete_user,
        ),
        ResourcePage(
            slug="products",
            title="Products Management",
            singular="Product",
            columns=[
                Column("id", "ID"),
                Column("product_name", "Product Name"),
                Column("price", "Price", render=render_price),
                Column("category", "Category"),
                Column("availability", "Stock", render=render_stock),
                Column("description", "Description", render=render_excerpt),
            ],
            load=lambda api: PageData(services.list_products(api)),
            fields=product_fields,
            create=services.create_product,
            update=services.update_product,
            delete=services.delete_product,
        ),
        ResourcePage(
            slug="recommendations",
            title="Recommendations Management",
            singular="Recommendation",
            columns=[
                Column("id", "ID"),
                Column("user.user_name", "User", render=fallback("Unknown User")),
                Column("product.product_name", "Product", render=fallback("Unknown Product")),
                Column("rating", "Rating", render=render_stars),
            ],
            load=load_recommendations,
            fields=recommendation_fields,
            create=create_recommendation,
            delete=services.delete_recommendation,
        ),
        ResourcePage(
            slug="orders",
            title="Orders Management",
            singular="Order",
            columns=[
                Column("id", "Order ID"),
                Column("user_id", "User ID"),
                Column("total_amount", "Total", render=render_price),
                Column("status", "Status", render=render_order_status),
                Column("created_at", "Date", render=render_date),
                Column("items", "Items", render=render_item_count),
            ],
            load=lambda api: PageData(services.list_orders(api)),
            advance=advance_order,
            empty_hint="Orders will appear here once customers start placing orders through the storefront.",
        ),
    ]
}


# -------------------- routes --------------------

def get_page(resource: str) -> ResourcePage:
    page = PAGES.get(resource)
    if page is None:
        raise HTTPException(status_code=404, detail="unknown resource")
    return page


async def read_form(request: Request) -> Dict[str, Any]:
    form = await request.form()
    return dict(form)


def load_page(page: ResourcePage, api: ServiceClient) -> PageData:
    try:
        return page.load(api)
    except ServiceError:
        logger.warning("failed to fetch %s", page.slug, exc_info=True)
        return PageData(records=[])


def find_record(data: PageData, record_id: int):
    return next((r for r in data.records if r.id == record_id), None)


def render_page(request: Request, page: ResourcePage, data: PageData, session: BrowserSession, form=None):
    table = build_table(
        page.title,
        data.records,
        page.columns,
        can_create=page.create is not None,
        can_edit=page.can_edit,
        can_delete=page.delete is not None,
        armed_id=session.confirmation(page.slug).armed_id,
    )
    return templates.TemplateResponse(
        request,
        "admin/resource.html",
        {"page": page, "table": table, "form": form, "pages": PAGES},
    )


def redirect_to(page: ResourcePage) -> RedirectResponse:
    return RedirectResponse(url=f"/admin/{page.slug}", status_code=303)


def collect(page: ResourcePage, form_data: Dict[str, Any], editing: bool) -> Dict[str, Any]:
    # Only names and kinds matter here, so select options need not be fetched.
    return collect_submission(page.fields(PageData(records=[]), editing), form_data)


@router.get("", response_class=HTMLResponse)
def dashboard(request: Request, api: ServiceClient = Depends(get_api)):
    stats = {"users": 0, "products": 0, "orders": 0, "recommendations": 0}
    try:
        users = services.list_users(api)
        products = services.list_products(api)
        recommendations = services.list_recommendations(api)
    except ServiceError:
        logger.warning("failed to fetch dashboard stats", exc_info=True)
    else:
        stats.update(users=len(users), products=len(products), recommendations=len(recommendations))
    return templates.TemplateResponse(request, "admin/dashboard.html", {"stats": stats, "pages": PAGES})


@router.get("/{resource}", response_class=HTMLResponse)
def resource_list(
    request: Request,
    resource: str,
    modal: Optional[str] = None,
    record_id: Optional[int] = Query(default=None, alias="id"),
    api: ServiceClient = Depends(get_api),
    session: BrowserSession = Depends(get_session),
):
    page = get_page(resource)
    data = load_page(page, api)
    form = None
    if page.fields is not None:
        if modal == "create" and page.create is not None:
            form = build_form(f"Create {page.singular}", f"/admin/{page.slug}", page.fields(data, False))
        elif modal == "edit" and page.update is not None and record_id is not None:
            record = find_record(data, record_id)
            if record is not None:
                form = build_form(
                    f"Edit {page.singular}",
                    f"/admin/{page.slug}/{record_id}/edit",
                    page.fields(data, True),
                    initial=record.model_dump(by_alias=True),
                )
    return render_page(request, page, data, session, form)


@router.post("/{resource}")
def resource_create(
    request: Request,
    resource: str,
    form_data: Dict[str, Any] = Depends(read_form),
    api: ServiceClient = Depends(get_api),
    session: BrowserSession = Depends(get_session),
):
    page = get_page(resource)
    if page.create is None or page.fields is None:
        raise HTTPException(status_code=405, detail="create not supported")
    values = collect(page, form_data, editing=False)
    try:
        page.create(api, values)
    except ServiceError:
        logger.warning("failed to create %s", page.singular.lower(), exc_info=True)
        data = load_page(page, api)
        form = build_form(f"Create {page.singular}", f"/admin/{page.slug}", page.fields(data, False), submitted=values)
        return render_page(request, page, data, session, form)
    return redirect_to(page)


@router.post("/{resource}/{record_id}/edit")
def resource_update(
    request: Request,
    resource: str,
    record_id: int,
    form_data: Dict[str, Any] = Depends(read_form),
    api: ServiceClient = Depends(get_api),
    session: BrowserSession = Depends(get_session),
):
    page = get_page(resource)
    if page.update is None or page.fields is None:
        raise HTTPException(status_code=405, detail="edit not supported")
    values = collect(page, form_data, editing=True)
    try:
        page.update(api, record_id, values)
    except ServiceError:
        logger.warning("failed to update %s %s", page.singular.lower(), record_id, exc_info=True)
        data = load_page(page, api)
        form = build_form(
            f"Edit {page.singular}", f"/admin/{page.slug}/{record_id}/edit", page.fields(data, True),
            submitted=values, editing=True,
        )
        return render_page(request, page, data, session, form)
    return redirect_to(page)


@router.post("/{resource}/{record_id}/advance")
def resource_advance(resource: str, record_id: int, api: ServiceClient = Depends(get_api)):
    page = get_page(resource)
    if page.advance is None:
        raise HTTPException(status_code=405, detail="advance not supported")
    record = find_record(load_page(page, api), record_id)
    if record is not None:
        try:
            page.advance(api, record)
        except ServiceError:
            logger.warning("failed to advance %s %s", page.singular.lower(), record_id, exc_info=True)
    return redirect_to(page)


@router.post("/{resource}/{record_id}/delete")
def resource_delete(
    resource: str,
    record_id: int,
    api: ServiceClient = Depends(get_api),
    session: BrowserSession = Depends(get_session),
):
    page = get_page(resource)
    if page.delete is None:
        raise HTTPException(status_code=405, detail="delete not supported")
    confirmation = session.confirmation(page.slug)
    if confirmation.activate(record_id):
        try:
            page.delete(api, record_id)
        except ServiceError:
            logger.warning("failed to delete %s %s", page.singular.lower(), record_id, exc_info=True)
    session.store_confirmation(page.slug, confirmation)
    return session.commit(redirect_to(page))

