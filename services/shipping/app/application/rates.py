"""
Stub carrier rate generator

Stands in for a real carrier API: quotes are synthesized from a fixed
carrier table, random package dimensions and a simple rate formula.
Pass a seeded ``random.Random`` to get repeatable quotes.
"""
import random
from typing import NamedTuple, Optional

class ServiceLevel(NamedTuple):
    name: str
    days: str
    base_rate: float

class CarrierConfig(NamedTuple):
    name: str
    tracking_prefix: str
    services: tuple

CARRIERS = {
    "ups": CarrierConfig("UPS", "1Z", (
        ServiceLevel("UPS Ground", "1-5", 8.50),
        ServiceLevel("UPS 2nd Day Air", "2", 16.00),
        ServiceLevel("UPS Next Day Air", "1", 25.00),
        ServiceLevel("UPS Express", "1-2", 35.00),
    )),
    "usps": CarrierConfig("USPS", "9400", (
        ServiceLevel("USPS Ground Advantage", "2-5", 7.50),
        ServiceLevel("USPS Priority Mail", "1-3", 8.85),
        ServiceLevel("USPS Priority Mail Express", "1-2", 26.95),
        ServiceLevel("USPS First Class", "1-3", 4.50),
    )),
    "fedex": CarrierConfig("FedEx", "1234", (
        ServiceLevel("FedEx Ground", "1-5", 9.25),
        ServiceLevel("FedEx 2Day", "2", 18.50),
        ServiceLevel("FedEx Standard Overnight", "1", 28.75),
        ServiceLevel("FedEx International", "1-3", 45.00),
    )),
    "dhl": CarrierConfig("DHL", "1234567890", (
        ServiceLevel("DHL Express", "1-2", 22.00),
        ServiceLevel("DHL Ground", "2-4", 12.50),
        ServiceLevel("DHL International", "2-5", 35.00),
        ServiceLevel("DHL Same Day", "1", 55.00),
    )),
    "aramex": CarrierConfig("Aramex", "AR", (
        ServiceLevel("Aramex Standard", "2-4", 15.00),
        ServiceLevel("Aramex Express", "1-2", 25.00),
        ServiceLevel("Aramex International", "3-7", 40.00),
        ServiceLevel("Aramex Same Day", "1", 50.00),
    )),
}

PACKAGE_TYPES = ("Express Envelope", "Poly Mailer", "Soft Pack", "Box", "Pouch")

DIM_FACTOR = 139
WEIGHT_SURCHARGE_PER_LB = 2.50
DIM_SURCHARGE_PER_LB = 1.50
DISTANCE_FACTOR = 1.1
DEFAULT_ESTIMATE = "3-5 days"

def _carrier_key(carrier) -> str:
    # accepts the Carrier enum or its plain string value
    return getattr(carrier, "value", carrier)

def calculate_shipping_rate(carrier, service_index: int, weight: float,
                            length: float, width: float, height: float) -> float:
    """Quote one service level for a package of the given weight (lb) and size (in)."""
    config = CARRIERS.get(_carrier_key(carrier))
    if config is None:
        raise ValueError(f"Unknown carrier: {carrier}")
    if not 0 <= service_index < len(config.services):
        raise ValueError(f"Unknown service index {service_index} for {config.name}")

    rate = config.services[service_index].base_rate
    rate += max(0.0, weight - 1) * WEIGHT_SURCHARGE_PER_LB
    dimensional_weight = (length * width * height) / DIM_FACTOR
    rate += max(0.0, dimensional_weight - weight) * DIM_SURCHARGE_PER_LB
    return round(rate * DISTANCE_FACTOR, 2)

def generate_tracking_number(carrier, rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    digits = "".join(str(rng.randint(0, 9)) for _ in range(10))
    return f"{CARRIERS[_carrier_key(carrier)].tracking_prefix}{digits}"

def delivery_estimate(carrier, service_level: str) -> str:
    config = CARRIERS.get(_carrier_key(carrier))
    if config:
        for service in config.services:
            if service.name == service_level:
                return f"{service.days} days"
    return DEFAULT_ESTIMATE

class DummyRateProvider:
    """Produces 2-4 candidate shipments per order from distinct carriers."""

    min_options = 2
    max_options = 4

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate_candidate_shipments(self, order_id: int, total_weight: float) -> list[dict]:
        count = self.rng.randint(self.min_options, self.max_options)
        carriers = self.rng.sample(sorted(CARRIERS), count)

        shipments = []
        for carrier in carriers:
            config = CARRIERS[carrier]
            service_index = self.rng.randrange(len(config.services))
            length = self.rng.uniform(8, 18)
            width = self.rng.uniform(6, 14)
            height = self.rng.uniform(2, 8)
            shipments.append({
                "order_id": order_id,
                "carrier": carrier,
                "service_level": config.services[service_index].name,
                "package_type": self.rng.choice(PACKAGE_TYPES),
                "weight_lb": total_weight,
                "length_in": round(length, 1),
                "width_in": round(width, 1),
                "height_in": round(height, 1),
                "rate_amount": calculate_shipping_rate(carrier, service_index, total_weight,
                                                       length, width, height),
                "rate_currency": "USD",
                "status": "pending",
            })
        return shipments
