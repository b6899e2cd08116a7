import http
from fastapi import APIRouter, Request


# schema
from schema.base import GenericResponseModel
from modules.serviceability.serviceability_schema import (
    RateCalculatorParamsModel,
    RateNormalizeRequestModel,
)

# utils
from utils.response_handler import build_api_response

# services
from .serviceability_service import ServiceabilityService

# limiter import
from limiter import limiter


serviceability_router = APIRouter(tags=["serviceability"])


@serviceability_router.post(
    "/ratecalculator",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
@limiter.limit("200/1second")
async def calculate_rate(
    rate_calculator_params: RateCalculatorParamsModel,
    request: Request,
):
    try:
        response: GenericResponseModel = ServiceabilityService.get_rate_quotes(
            rate_calculator_params
        )
        return build_api_response(response)
    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while calculating the rate.",
            )
        )


@serviceability_router.post(
    "/rates/normalize",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def normalize_rates(normalize_params: RateNormalizeRequestModel):
    try:
        response: GenericResponseModel = ServiceabilityService.normalize_quotes(
            normalize_params
        )
        return build_api_response(response)
    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while normalizing the quotes.",
            )
        )
