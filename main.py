import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

import cart as cart_service
import catalog
import orders as order_service
import saas
import seed
import tasks as task_service
from auth import issue_operator_token, require_operator
from database import close_db, get_db
from errors import DatabaseNotConfiguredError, PortfolioError, describe_validation_errors
from schemas import AnalyticsUpdate, CartItemRequest, OrderCreateRequest, Task, TaskUpdate, TokenRequest, User

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_db()


app = FastAPI(title="Portfolio Apps API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ----------------------- Errors -----------------------
@app.exception_handler(PortfolioError)
async def portfolio_error_handler(request: Request, exc: PortfolioError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": describe_validation_errors(exc.errors())})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


@app.exception_handler(PyMongoError)
async def database_error_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Database error"})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ----------------------- Health -----------------------
@app.get("/")
def root():
    return {"message": "Portfolio Apps API running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "operator_access": "✅ Set" if os.getenv("ADMIN_KEY") else "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": [],
    }
    try:
        db = get_db()
        response["collections"] = db.list_collection_names()[:10]
        response["database"] = "✅ Connected & Working"
        response["connection_status"] = "Connected"
    except DatabaseNotConfiguredError:
        response["database"] = "⚠️  Not configured"
    except PyMongoError as e:
        response["database"] = f"❌ Error: {str(e)[:80]}"
    return response


# ----------------------- Operator -----------------------
@app.post("/admin/token")
def operator_token(body: TokenRequest):
    return {"token": issue_operator_token(body.key)}


# ----------------------- Products -----------------------
@app.get("/products")
def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    featured: Optional[bool] = None,
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    sort: Optional[str] = None,
    limit: int = Query(100, ge=1, le=100),
    db=Depends(get_db),
):
    return catalog.list_products(db, category, search, featured, min_price, max_price, sort, limit)


@app.post("/products/seed")
def seed_products(operator=Depends(require_operator), db=Depends(get_db)):
    count = seed.seed_products(db)
    return {"message": "Database seeded successfully", "count": count}


@app.get("/products/{product_id}")
def get_product(product_id: str, db=Depends(get_db)):
    return catalog.get_product(db, product_id)


# ----------------------- Cart -----------------------
@app.get("/cart")
def get_cart(user: str = Query(..., min_length=1), db=Depends(get_db)):
    return cart_service.get_cart(db, user)


@app.post("/cart")
def add_to_cart(body: CartItemRequest, db=Depends(get_db)):
    return cart_service.upsert_item(db, body.user, body.product_id, body.quantity)


@app.delete("/cart")
def remove_from_cart(
    user: str = Query(..., min_length=1),
    product_id: Optional[str] = Query(None, alias="productId"),
    db=Depends(get_db),
):
    if product_id:
        return cart_service.remove_item(db, user, product_id)
    return cart_service.clear_cart(db, user)


# ----------------------- Orders -----------------------
@app.get("/orders")
def list_orders(
    user: str = Query(..., min_length=1),
    status: Optional[str] = None,
    id: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=order_service.MAX_PAGE_SIZE),
    db=Depends(get_db),
):
    return order_service.list_orders(db, user, status=status, order_id=id, page=page, limit=limit)


@app.post("/orders", status_code=201)
def create_order(body: OrderCreateRequest, db=Depends(get_db)):
    return order_service.place_order(db, body.user, body.shipping_address, body.payment_method)


@app.put("/orders")
def update_order(id: str = Query(..., min_length=1), updates: Dict[str, Any] = Body(...), db=Depends(get_db)):
    return order_service.update_order(db, id, updates)


# ----------------------- Tasks -----------------------
@app.get("/tasks")
def list_tasks(db=Depends(get_db)):
    return task_service.list_tasks(db)


@app.post("/tasks", status_code=201)
def create_task(body: Task, db=Depends(get_db)):
    return task_service.create_task(db, body)


@app.get("/tasks/{task_id}")
def get_task(task_id: str, db=Depends(get_db)):
    return task_service.get_task(db, task_id)


@app.put("/tasks/{task_id}")
def update_task(task_id: str, body: TaskUpdate, db=Depends(get_db)):
    return task_service.update_task(db, task_id, body)


@app.delete("/tasks/{task_id}")
def delete_task(task_id: str, db=Depends(get_db)):
    task_service.delete_task(db, task_id)
    return {"message": "Task deleted successfully"}


# ----------------------- SaaS -----------------------
@app.get("/saas/users")
def list_users(db=Depends(get_db)):
    return saas.list_users(db)


@app.post("/saas/users", status_code=201)
def create_user(body: User, db=Depends(get_db)):
    return saas.create_user(db, body)


@app.get("/saas/analytics")
def get_analytics(period: str = saas.DEFAULT_PERIOD, db=Depends(get_db)):
    return saas.get_analytics(db, period)


@app.post("/saas/analytics", status_code=201)
def record_analytics(body: AnalyticsUpdate, db=Depends(get_db)):
    return saas.record_today(db, body)


@app.get("/saas/summary")
def get_summary(period: str = saas.DEFAULT_PERIOD, db=Depends(get_db)):
    return saas.get_summary(db, period)


@app.post("/saas/seed")
def seed_saas(operator=Depends(require_operator), db=Depends(get_db)):
    counts = seed.seed_saas(db)
    return {"message": "Database seeded successfully", **counts}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
