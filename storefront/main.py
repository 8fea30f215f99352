import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from storefront.config import settings
from storefront.database import create_tables
from storefront.presentation.api import router as orders_router
from storefront.presentation.catalog_api import router as catalog_router
from storefront.presentation.cart_api import router as cart_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Управление жизненным циклом приложения"""
    try:
        await create_tables()
        logger.info("Таблицы созданы")
    except SQLAlchemyError as e:
        logger.error(f"Не удалось создать таблицы: {e}")
        raise

    yield

    logger.info("Приложение останавливается...")


app = FastAPI(
    title="Storefront Service",
    description="Бэкенд интернет-магазина: каталог, корзина, заказы",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Ошибки валидации запроса отдаем как 400, а не 422"""
    logger.info(f"Некорректный запрос {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())}
    )


app.include_router(orders_router, prefix="/api")
app.include_router(catalog_router, prefix="/api")
app.include_router(cart_router, prefix="/api")


@app.get("/")
async def root():
    return {"message": "Storefront Service работает"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
