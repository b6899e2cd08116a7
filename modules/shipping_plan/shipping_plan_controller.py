import http
from fastapi import APIRouter


# schema
from schema.base import GenericResponseModel
from .shipping_plan_schema import PlanDiffRequestModel, PriceAdjustmentRequestModel

# utils
from utils.response_handler import build_api_response

# services
from .shipping_plan_service import ShippingPlanService


shipping_plan_router = APIRouter(tags=["shipping_plan"], prefix="/plans")


@shipping_plan_router.post(
    "/diff",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def compare_plans(diff_params: PlanDiffRequestModel):
    try:
        response: GenericResponseModel = ShippingPlanService.compare_plans(diff_params)
        return build_api_response(response)
    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while comparing the plans.",
            )
        )


@shipping_plan_router.post(
    "/price-adjustment",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def preview_price_adjustment(adjustment_params: PriceAdjustmentRequestModel):
    try:
        response: GenericResponseModel = ShippingPlanService.preview_price_adjustment(
            adjustment_params
        )
        return build_api_response(response)
    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while adjusting the prices.",
            )
        )
