from emerald_details.integrations.geocoding import Geocoder, NominatimGeocoder
from emerald_details.integrations.identity import IdentityProvider, InMemoryIdentityProvider
from emerald_details.integrations.payments import (
    MockPaymentGateway,
    PaymentGateway,
    PaymentIntent,
    build_gateway,
)

__all__ = [
    "Geocoder", "NominatimGeocoder",
    "IdentityProvider", "InMemoryIdentityProvider",
    "MockPaymentGateway", "PaymentGateway", "PaymentIntent", "build_gateway",
]
