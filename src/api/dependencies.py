"""FastAPI dependency injection providers."""

from typing import Annotated

from fastapi import Depends, Request

from fare import FareEstimator
from rides import PaymentMethodService, PaymentService, RideLifecycleManager
from settings import Settings


def get_lifecycle(request: Request) -> RideLifecycleManager:
    """Retrieve the ride lifecycle manager from app state."""
    lifecycle: RideLifecycleManager = request.app.state.lifecycle
    return lifecycle


def get_payment_service(request: Request) -> PaymentService:
    payments: PaymentService = request.app.state.payments
    return payments


def get_payment_methods(request: Request) -> PaymentMethodService:
    methods: PaymentMethodService = request.app.state.payment_methods
    return methods


def get_estimator(request: Request) -> FareEstimator:
    estimator: FareEstimator = request.app.state.estimator
    return estimator


def get_app_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


LifecycleDep = Annotated[RideLifecycleManager, Depends(get_lifecycle)]
PaymentServiceDep = Annotated[PaymentService, Depends(get_payment_service)]
PaymentMethodsDep = Annotated[PaymentMethodService, Depends(get_payment_methods)]
EstimatorDep = Annotated[FareEstimator, Depends(get_estimator)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
