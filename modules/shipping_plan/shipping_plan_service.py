import http

from context_manager.context import context_user_data

from logger import logger

# schema
from schema.base import GenericResponseModel
from .shipping_plan_schema import (
    PlanDiffRequestModel,
    PlanDiffResponseModel,
    PriceAdjustmentRequestModel,
)

# services
from .plan_diff_service import PlanDiffEngine, apply_bulk_price_adjustment


class ShippingPlanService:

    @staticmethod
    def compare_plans(diff_params: PlanDiffRequestModel) -> GenericResponseModel:
        engine = PlanDiffEngine()

        if diff_params.keyed_by_courier_id:
            result = engine.diff_by_courier_id(diff_params.current, diff_params.original)
        else:
            result = engine.diff(diff_params.current, diff_params.original)

        logger.info(
            extra=context_user_data.get(),
            msg="Plan diff found {} changed couriers".format(
                len(result.changed_couriers)
            ),
        )

        return GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data=PlanDiffResponseModel(**result.to_dict()),
            message="Plan compared successfully",
        )

    @staticmethod
    def preview_price_adjustment(
        adjustment_params: PriceAdjustmentRequestModel,
    ) -> GenericResponseModel:
        """
        Apply a percentage change to the selected couriers and return the
        adjusted rate cards with the diff against the submitted ones.
        Nothing is persisted.
        """
        count = len(adjustment_params.courierPricing)
        invalid = [
            index
            for index in adjustment_params.selectedIndices
            if index < 0 or index >= count
        ]

        if invalid:
            return GenericResponseModel(
                status_code=http.HTTPStatus.BAD_REQUEST,
                status=False,
                message="Invalid courier selection: {}".format(invalid),
            )

        if adjustment_params.adjustmentPercent < -100:
            return GenericResponseModel(
                status_code=http.HTTPStatus.BAD_REQUEST,
                status=False,
                message="Adjustment cannot lower prices by more than 100%",
            )

        adjusted = apply_bulk_price_adjustment(
            adjustment_params.courierPricing,
            adjustment_params.selectedIndices,
            adjustment_params.adjustmentPercent,
        )

        diff = PlanDiffEngine().diff(adjusted, adjustment_params.courierPricing)

        return GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data={
                "courierPricing": adjusted,
                "diff": PlanDiffResponseModel(**diff.to_dict()),
            },
            message="Price adjustment applied",
        )
