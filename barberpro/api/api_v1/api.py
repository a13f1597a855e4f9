from fastapi import APIRouter
from barberpro.api.api_v1.endpoints import auth, barbers, services, availability, appointments, notifications, reminders

router = APIRouter()

# Include all routers
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(barbers.router, prefix="/barbers", tags=["Barbers"])
router.include_router(services.router, prefix="/services", tags=["Services"])
router.include_router(availability.router, prefix="/availability", tags=["Availability"])
router.include_router(appointments.router, prefix="/appointments", tags=["Appointments"])
router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
router.include_router(reminders.router, prefix="/reminders", tags=["Reminders"])
