"""
B.I Booster Backend — Catalog Schemas
=======================================

Packages and template categories shown on the storefront.
"""

from typing import List

from pydantic import BaseModel, Field


class PackageResponse(BaseModel):
    id: str = Field(description="Package id, also the member access tier: small, medium, large, enterprise")
    name: str = Field(description="Display name, e.g. 'Paket Small'")
    price: str = Field(description="Display price, e.g. 'Rp 500.000'")
    description: str
    features: List[str]
    is_popular: bool = Field(default=False, description="Highlighted on the storefront")


class PackageListResponse(BaseModel):
    packages: List[PackageResponse]


class TemplateCategoryResponse(BaseModel):
    slug: str = Field(description="URL-friendly category key")
    name: str
    description: str
    image: str = Field(description="Cover image URL")


class TemplateCategoryListResponse(BaseModel):
    categories: List[TemplateCategoryResponse]
