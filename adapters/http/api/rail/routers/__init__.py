from .route_search_router import router as route_search_router

__all__ = ["route_search_router"]
