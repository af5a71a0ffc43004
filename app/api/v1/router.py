"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import auth, bookings, destinations, users

api_router = APIRouter()

# Authentication
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Users (admin)
api_router.include_router(users.router, prefix="/users", tags=["Users"])

# Destinations
api_router.include_router(destinations.router, prefix="/destinations", tags=["Destinations"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])
