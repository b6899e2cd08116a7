from fastapi import APIRouter, Depends

from context_manager.context import build_request_context

# routers
from modules.serviceability import serviceability_router
from modules.shipping_plan import shipping_plan_router


# create a common master router for all the routes in the service
CommonRouter = APIRouter(
    prefix="/api/v1",
    dependencies=[Depends(build_request_context)],
)


# add all the routes to the master router
CommonRouter.include_router(serviceability_router)
CommonRouter.include_router(shipping_plan_router)
