"""Pricing catalog: the three fixed tiers and the derived-total rule."""

from typing import Dict, Iterable, List, Optional

from atelier.models.package import PackageDescriptor

_PACKAGES = (
    PackageDescriptor(
        slug="starter",
        name="Starter",
        base_price=900,
        display_price="$900",
        standard_duration_days=4,
        rush_duration_days=2,
        rush_fee=200,
        description="2–3 pages, modern motion, responsive. Fast launch.",
        audience="Cafés, barbers, freelancers",
        features=[
            "2–3 custom pages",
            "Responsive + performance pass",
            "Simple lead/contact form",
            "Launch in days",
        ],
        cta_label="Start Starter",
    ),
    PackageDescriptor(
        slug="growth",
        name="Growth",
        base_price=2300,
        display_price="$2,300",
        standard_duration_days=8,
        rush_duration_days=6,
        rush_fee=400,
        description="5–7 pages, SEO + schema, booking, Maps, integrations.",
        audience="Dentists, gyms, restaurants, small firms",
        features=[
            "5–7 custom pages",
            "On-page SEO + schema",
            "Booking & Maps",
            "3rd-party integrations",
            "Content guidance",
        ],
        cta_label="Grow with Growth",
        highlight=True,
    ),
    PackageDescriptor(
        slug="scale",
        name="Scale",
        base_price=7000,
        display_price="$7,000",
        standard_duration_days=14,
        rush_duration_days=10,
        rush_fee=800,
        description="10+ pages, strategy, advanced SEO + analytics, CRM/e-com.",
        audience="Law, real estate, healthcare, e-com",
        features=[
            "10+ pages",
            "Strategy + funnel mapping",
            "Advanced SEO + analytics",
            "Booking / e-com / CRM",
            "Copy support",
        ],
        cta_label="Scale with Scale",
    ),
)


class PricingCatalog:
    """Read-only lookup of packages by slug."""

    def __init__(self, packages: Iterable[PackageDescriptor]) -> None:
        self._by_slug: Dict[str, PackageDescriptor] = {}
        for package in packages:
            if package.slug in self._by_slug:
                raise ValueError(f"Duplicate package slug '{package.slug}'.")
            self._by_slug[package.slug] = package

    def lookup(self, slug: str) -> Optional[PackageDescriptor]:
        return self._by_slug.get(slug)

    def all(self) -> List[PackageDescriptor]:
        return list(self._by_slug.values())

    def __contains__(self, slug: object) -> bool:
        return slug in self._by_slug


CATALOG = PricingCatalog(_PACKAGES)


def compute_total(package: PackageDescriptor, rush_requested: bool) -> int:
    """Base price plus the rush fee when rush delivery is requested."""
    return package.base_price + (package.rush_fee if rush_requested else 0)
