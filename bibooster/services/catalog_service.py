"""
B.I Booster Backend — Catalog Service
=======================================

What:  Read-only storefront content: the four template packages and the
       template categories.
How:   Static data held in module constants. Package ids double as member
       access tiers, ranked small < medium < large < enterprise.
Who:   Catalog routes, OrderService (price/name lookup) and LearningService
       (tier ranking for lesson locks).
"""

import logging
from typing import Iterable, List, Optional

from bibooster.exceptions import NotFoundError
from bibooster.schemas.catalog import (
    PackageListResponse,
    PackageResponse,
    TemplateCategoryListResponse,
    TemplateCategoryResponse,
)

logger = logging.getLogger(__name__)

# Ordered lowest to highest
PACKAGE_TIERS = ("small", "medium", "large", "enterprise")

PACKAGES = [
    PackageResponse(
        id="small",
        name="Paket Small",
        price="Rp 500.000",
        description="Solusi esensial untuk membangun fondasi digital bisnis Anda.",
        features=[
            "Website Profesional Siap Pakai",
            "Akses Penuh Platform Edukasi (LMS)",
            "Grup Komunitas WhatsApp & Discord",
        ],
    ),
    PackageResponse(
        id="medium",
        name="Paket Medium",
        price="Rp 1.000.000",
        description="Pilihan ideal untuk UMKM yang ingin mulai meningkatkan visibilitas online.",
        features=[
            "Semua fitur di Paket Small",
            "Optimasi SEO Standar",
            "Integrasi Media Sosial & WhatsApp",
        ],
        is_popular=True,
    ),
    PackageResponse(
        id="large",
        name="Paket Large",
        price="Rp 2.000.000",
        description="Untuk bisnis yang siap bertumbuh dan mendapatkan bimbingan ahli.",
        features=[
            "Semua fitur di Paket Medium",
            "Optimasi SEO Lanjutan (Bagus)",
            "Terhubung dengan Mentor untuk Pembelajaran",
        ],
    ),
    PackageResponse(
        id="enterprise",
        name="Paket Bisnis (Enterprise)",
        price="Mulai dari Rp 5.000.000",
        description=(
            "Solusi lengkap untuk membawa tim Anda ke level selanjutnya "
            "dengan bimbingan penuh."
        ),
        features=[
            "Semua fitur di Paket Large",
            "Optimasi SEO Terbaik & Laporan Performa",
            "Mentoring Langsung untuk Tim (hingga 10 orang)",
            "Sertifikasi Keahlian Setelah Selesai",
        ],
    ),
]

_UNSPLASH = "https://images.unsplash.com/{}?w=400&h=300&fit=crop"

TEMPLATE_CATEGORIES = [
    TemplateCategoryResponse(
        slug="laundry",
        name="Laundry",
        description="Template khusus untuk bisnis laundry dan dry cleaning",
        image=_UNSPLASH.format("photo-1582735689369-4fe89db7114c"),
    ),
    TemplateCategoryResponse(
        slug="makanan",
        name="Makanan",
        description="Showcase menu dan layanan kuliner Anda",
        image=_UNSPLASH.format("photo-1555939594-58d7cb561ad1"),
    ),
    TemplateCategoryResponse(
        slug="kerajinan-tangan",
        name="Kerajinan Tangan",
        description="Tampilkan karya seni dan kerajinan unik Anda",
        image=_UNSPLASH.format("photo-1452860606245-08befc0ff44b"),
    ),
    TemplateCategoryResponse(
        slug="fashion",
        name="Fashion",
        description="Etalase produk fashion dan aksesori terbaik",
        image=_UNSPLASH.format("photo-1441986300917-64674bd600d8"),
    ),
    TemplateCategoryResponse(
        slug="kecantikan",
        name="Kecantikan",
        description="Template untuk salon dan layanan kecantikan",
        image=_UNSPLASH.format("photo-1560472354-b33ff0c44a43"),
    ),
    TemplateCategoryResponse(
        slug="teknologi",
        name="Teknologi",
        description="Solusi digital untuk bisnis teknologi",
        image=_UNSPLASH.format("photo-1518709268805-4e9042af2176"),
    ),
]


def tier_rank(tier: Optional[str]) -> int:
    """
    Rank of a tier: 1 for small up to 4 for enterprise.

    0 for 'none', None and anything unknown, so those never outrank a
    real package.
    """
    if not tier:
        return 0
    try:
        return PACKAGE_TIERS.index(tier.lower()) + 1
    except ValueError:
        return 0


def tier_allows(member_tier: Optional[str], required: Iterable[str]) -> bool:
    """True when member_tier reaches the lowest tier listed in `required`."""
    ranks = [tier_rank(t) for t in required]
    ranks = [r for r in ranks if r > 0]
    if not ranks:
        return True
    return tier_rank(member_tier) >= min(ranks)


class CatalogService:
    """Lookups over the static package and category lists."""

    def list_packages(self) -> PackageListResponse:
        return PackageListResponse(packages=list(PACKAGES))

    def get_package(self, package_id: str) -> PackageResponse:
        for package in PACKAGES:
            if package.id == package_id:
                return package
        raise NotFoundError(resource="package", resource_id=package_id)

    def find_package(self, package_id: str) -> Optional[PackageResponse]:
        return next((p for p in PACKAGES if p.id == package_id), None)

    def list_template_categories(self) -> TemplateCategoryListResponse:
        return TemplateCategoryListResponse(categories=list(TEMPLATE_CATEGORIES))

    def package_ids(self) -> List[str]:
        return [p.id for p in PACKAGES]


catalog_service = CatalogService()
