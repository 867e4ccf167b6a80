from ninja import NinjaAPI

from apps.ledger.api import router as system_router
from apps.records.api import router as records_router
from apps.users.api import router as users_router

api = NinjaAPI(
    title="Medical Records Ledger API",
    version="1.0.0",
)

api.add_router("/users/", users_router)
api.add_router("/records/", records_router)
api.add_router("/system/", system_router)
