from fastapi import APIRouter
from app.routers.users import UsersRouter
from app.routers.utils import UtilsRouter

router = APIRouter()

UsersRouter(router)
UtilsRouter(router)
