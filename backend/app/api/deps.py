from fastapi import Request

from app.services.objects import ObjectService


def get_object_service(request: Request) -> ObjectService:
    return request.app.state.object_service
