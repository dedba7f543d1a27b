"""Sample service."""

from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter(tags=["hello"])


class HelloResponse(BaseModel):
    result: str


@router.get("/hello", response_model=HelloResponse)
@router.get("/hello/{name}", response_model=HelloResponse)
async def hello(name: str = "") -> HelloResponse:
    """Greet by name.

    Example:
        GET /hello/World

        Response:
        {"result": "Hello, World!"}
    """
    return HelloResponse(result=f"Hello, {name}!")
