"""Service catalog repository."""

import logging

from emerald_details.schemas.service_schema import ServicePackage, default_services
from emerald_details.repositories.base import Repository
from emerald_details.store.document_store import FieldFilter

logger = logging.getLogger(__name__)


class ServicePackageRepository(Repository[ServicePackage]):
    collection = "services"
    model = ServicePackage

    async def all(self) -> list[ServicePackage]:
        return await self.find(order_by="sort_order")

    async def active(self) -> list[ServicePackage]:
        return await self.find([FieldFilter("is_active", "==", True)], order_by="sort_order")

    async def update(self, service: ServicePackage) -> ServicePackage:
        """Merge an edited package. Existing appointments keep their snapshot."""
        return await self.save(service)

    async def toggle_active(self, service_id: str) -> bool:
        service = await self.require(service_id)
        new_status = not service.is_active
        await self.update_fields(service_id, {"is_active": new_status})
        logger.info("Service %s active=%s", service.name, new_status)
        return new_status

    async def seed_defaults(self) -> list[ServicePackage]:
        services = default_services()
        for service in services:
            await self.create(service)
        logger.info("Seeded %d default services", len(services))
        return services
