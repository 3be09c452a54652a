from views.event_creation import register_event_creation
from views.event_post import register_event_post
from views.routing import ComponentId, ComponentRouter, build_custom_id, split_custom_id


def build_component_router() -> ComponentRouter:
    router = ComponentRouter()
    register_event_creation(router)
    register_event_post(router)
    router.validate()
    return router


__all__ = [
    "ComponentId",
    "ComponentRouter",
    "build_component_router",
    "build_custom_id",
    "split_custom_id",
]
