from trackvault.products.rates.entities import ProductRateEntity, SupersedeResult
from trackvault.products.rates.resolver import RateResolver, default_resolver

__all__ = ["ProductRateEntity", "RateResolver", "SupersedeResult", "default_resolver"]
