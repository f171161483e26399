from typing import Annotated

from fastapi import Depends, Request

from study_assistant.infrastructure.container import AppContainer


def get_container(request: Request) -> AppContainer:
    """
    Dependency injection for the AppContainer.
    Pulls the instance from the app state (initialized in lifespan).
    """
    return request.app.state.container


def get_curriculum(container: Annotated[AppContainer, Depends(get_container)]):
    return container.curriculum


def get_reference_catalog(container: Annotated[AppContainer, Depends(get_container)]):
    return container.reference_catalog


def get_topic_content_service(container: Annotated[AppContainer, Depends(get_container)]):
    return container.topic_content_service


def get_assistant_query_use_case(container: Annotated[AppContainer, Depends(get_container)]):
    return container.assistant_query_use_case


def get_record_progress_use_case(container: Annotated[AppContainer, Depends(get_container)]):
    return container.record_progress_use_case


def get_activity_repository(container: Annotated[AppContainer, Depends(get_container)]):
    return container.activity_repository
