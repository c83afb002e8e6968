"""
B.I Booster Backend — Catalog Routes
======================================

Public storefront content. Responses are static, so they carry a short
public Cache-Control.
"""

from fastapi import APIRouter, Response

from bibooster.schemas.catalog import (
    PackageListResponse,
    PackageResponse,
    TemplateCategoryListResponse,
)
from bibooster.schemas.common import ErrorResponse
from bibooster.services.catalog_service import catalog_service

router = APIRouter(prefix="/api", tags=["Catalog"])

_CACHE = "public, max-age=300"


@router.get(
    "/packages",
    response_model=PackageListResponse,
    summary="List template packages",
)
async def list_packages(response: Response) -> PackageListResponse:
    response.headers["Cache-Control"] = _CACHE
    return catalog_service.list_packages()


@router.get(
    "/packages/{package_id}",
    response_model=PackageResponse,
    responses={404: {"description": "Unknown package", "model": ErrorResponse}},
    summary="Get one template package",
)
async def get_package(package_id: str, response: Response) -> PackageResponse:
    package = catalog_service.get_package(package_id.lower())
    response.headers["Cache-Control"] = _CACHE
    return package


@router.get(
    "/templates/categories",
    response_model=TemplateCategoryListResponse,
    summary="List website template categories",
)
async def list_template_categories(response: Response) -> TemplateCategoryListResponse:
    response.headers["Cache-Control"] = _CACHE
    return catalog_service.list_template_categories()
