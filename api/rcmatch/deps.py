from fastapi import Request

from .services.core import MatchCore


def get_core(request: Request) -> MatchCore:
    return request.app.state.core
