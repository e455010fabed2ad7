from __future__ import annotations

from typing import Protocol

from route_optimizer.models import Address
from route_optimizer.services.types import Point


class AddressStore(Protocol):
    def get_by_id(self, address_id: int) -> Point | None: ...


class DjangoAddressStore:
    def get_by_id(self, address_id: int) -> Point | None:
        address = Address.objects.filter(pk=address_id).first()
        if address is None:
            return None
        return address.as_point()
