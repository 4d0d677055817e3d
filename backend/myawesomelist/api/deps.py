"""FastAPI dependencies."""

from fastapi import Request

from myawesomelist.services.awesome import Awesome


def get_awesome(request: Request) -> Awesome:
    """The application container built in the lifespan."""
    return request.app.state.awesome
