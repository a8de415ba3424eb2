import logging
from typing import Optional

from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from . import admin, cart, config, services
from .client import ServiceClient, ServiceError, get_api
from .session import BrowserSession, get_session
from .templating import STATIC_DIR, templates
from .utils import CATEGORIES, FEATURED_COUNT, filter_products, sanitize_input

config.configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Storefront")

app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
app.include_router(admin.router)


@app.get("/health")
async def health():
    return {"status": "ok"}


# -------------------- storefront --------------------

@app.get("/", response_class=HTMLResponse)
def home(request: Request, api: ServiceClient = Depends(get_api)):
    try:
        featured = services.list_products(api)[:FEATURED_COUNT]
    except ServiceError:
        logger.warning("failed to fetch featured products", exc_info=True)
        featured = []
    return templates.TemplateResponse(request, "home.html", {"products": featured})


@app.get("/products", response_class=HTMLResponse)
def products_page(request: Request, q: str = "", category: str = "All", api: ServiceClient = Depends(get_api)):
    try:
        products = services.list_products(api)
    except ServiceError:
        logger.warning("failed to fetch products", exc_info=True)
        products = []
    term = sanitize_input(q)
    toast = None
    if term != " ".join(q.split()):
        toast = "Invalid input detected; the search term has been sanitized for safety."
    if category not in CATEGORIES:
        category = "All"
    filtered = filter_products(products, category, term)
    return templates.TemplateResponse(
        request,
        "products.html",
        {
            "products": filtered,
            "total": len(products),
            "q": term,
            "category": category,
            "categories": CATEGORIES,
            "toast": toast,
        },
    )


@app.get("/recommendations", response_class=HTMLResponse)
def recommendations_page(request: Request, api: ServiceClient = Depends(get_api)):
    try:
        recommendations = services.list_recommendations(api)
    except ServiceError:
        logger.warning("failed to fetch recommendations", exc_info=True)
        recommendations = []
    return templates.TemplateResponse(request, "recommendations.html", {"recommendations": recommendations})


# -------------------- cart --------------------

@app.get("/cart", response_class=HTMLResponse)
def cart_page(
    request: Request,
    full: bool = False,
    api: ServiceClient = Depends(get_api),
    session: BrowserSession = Depends(get_session),
):
    lines = cart.load_lines(session.cart)
    unavailable = False
    items = []
    if lines:
        try:
            items = cart.resolve(lines, services.list_products(api))
        except ServiceError:
            logger.warning("failed to fetch products for the cart", exc_info=True)
            unavailable = True
        else:
            if len(items) < len(lines):
                kept = {i.id for i in items}
                session.cart = cart.dump_lines([line for line in lines if line.id in kept])
    response = templates.TemplateResponse(
        request,
        "cart.html",
        {
            "items": items,
            "totals": cart.totals(items),
            "full": full,
            "unavailable": unavailable,
            "max_lines": cart.MAX_LINES,
        },
    )
    return session.commit(response)


@app.post("/cart/items")
def cart_add(
    product_id: int = Form(...),
    quantity: int = Form(default=1),
    redirect: str = Form(default="/cart"),
    api: ServiceClient = Depends(get_api),
    session: BrowserSession = Depends(get_session),
):
    # Only local paths are followed.
    target = redirect if redirect.startswith("/") and not redirect.startswith("//") else "/cart"
    try:
        product = services.get_product(api, product_id)
    except ServiceError:
        logger.warning("failed to add product %s to cart", product_id, exc_info=True)
        return RedirectResponse(url=target, status_code=303)
    user_id = config.get_settings().profile_user_id
    try:
        lines = cart.add_line(cart.load_lines(session.cart), product.id, user_id, max(quantity, 1))
    except cart.CartFull:
        logger.info("cart full, refusing product %s", product_id)
        return RedirectResponse(url="/cart?full=1", status_code=303)
    session.cart = cart.dump_lines(lines)
    return session.commit(RedirectResponse(url=target, status_code=303))


@app.post("/cart/items/{item_id}")
def cart_update(item_id: int, quantity: int = Form(...), session: BrowserSession = Depends(get_session)):
    lines = cart.update_quantity(cart.load_lines(session.cart), item_id, quantity)
    session.cart = cart.dump_lines(lines)
    return session.commit(RedirectResponse(url="/cart", status_code=303))


@app.post("/cart/items/{item_id}/remove")
def cart_remove(item_id: int, session: BrowserSession = Depends(get_session)):
    lines = cart.remove_line(cart.load_lines(session.cart), item_id)
    session.cart = cart.dump_lines(lines)
    return session.commit(RedirectResponse(url="/cart", status_code=303))


# -------------------- profile --------------------

def _load_profile(api: ServiceClient, user_id: int):
    try:
        user = services.get_user(api, user_id)
    except ServiceError:
        logger.warning("failed to fetch user %s", user_id, exc_info=True)
        return None, []
    try:
        reviews = services.list_recommendations(api, user_id=user_id)
    except ServiceError:
        logger.warning("failed to fetch reviews of user %s", user_id, exc_info=True)
        reviews = []
    return user, reviews


@app.get("/profile", response_class=HTMLResponse)
def profile_page(request: Request, user_id: Optional[int] = None, edit: bool = False, api: ServiceClient = Depends(get_api)):
    user_id = user_id or config.get_settings().profile_user_id
    user, reviews = _load_profile(api, user_id)
    return templates.TemplateResponse(
        request,
        "profile.html",
        {"user": user, "reviews": reviews, "editing": edit and user is not None, "user_id": user_id},
    )


@app.post("/profile")
def profile_save(
    request: Request,
    user_id: int = Form(...),
    first_name: str = Form(default=""),
    last_name: str = Form(default=""),
    email: str = Form(default=""),
    phone: str = Form(default=""),
    address: str = Form(default=""),
    api: ServiceClient = Depends(get_api),
):
    try:
        user = services.get_user(api, user_id)
        details = user.user_details.model_dump(by_alias=True) if user.user_details else {}
        details.update(firstName=first_name, lastName=last_name, email=email, phone=phone, address=address)
        payload = user.model_dump(by_alias=True, exclude={"user_password"})
        payload["userDetails"] = details
        services.update_user(api, user_id, payload)
    except ServiceError:
        logger.warning("failed to save profile of user %s", user_id, exc_info=True)
        user, reviews = _load_profile(api, user_id)
        return templates.TemplateResponse(
            request,
            "profile.html",
            {"user": user, "reviews": reviews, "editing": user is not None, "user_id": user_id},
        )
    return RedirectResponse(url=f"/profile?user_id={user_id}", status_code=303)
