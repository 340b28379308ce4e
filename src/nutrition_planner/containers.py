"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta

from supabase import create_client

from nutrition_planner.adapters.mongo_user_repository import MongoUserRepository
from nutrition_planner.adapters.openai_assistant_client import OpenAIAssistantClient
from nutrition_planner.adapters.supabase_user_repository import (
    SupabaseUserRepository,
)
from nutrition_planner.config import Settings
from nutrition_planner.services.assistant import AssistantService
from nutrition_planner.services.auth import AuthService, UserRepository
from nutrition_planner.services.passwords import PasswordHasher
from nutrition_planner.services.tokens import TokenSigner


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    assistant_service: AssistantService | None
    close_resources: Callable[[], Awaitable[None]]


def build_user_repository(settings: Settings) -> UserRepository:
    """Create the user repository for the configured store."""
    if settings.user_store == "supabase":
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseUserRepository(client)
    return MongoUserRepository.create(
        uri=settings.mongo_uri,
        db_name=settings.mongo_db,
        timeout_ms=settings.mongo_timeout_ms,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    user_repository = build_user_repository(resolved_settings)
    auth_service = AuthService(
        repository=user_repository,
        tokens=TokenSigner(
            secret=resolved_settings.jwt_secret,
            ttl=timedelta(days=resolved_settings.jwt_expiry_days),
        ),
        hasher=PasswordHasher(rounds=resolved_settings.bcrypt_rounds),
    )
    assistant_client = None
    assistant_service = None
    if resolved_settings.openai_api_key:
        assistant_client = OpenAIAssistantClient.create(
            resolved_settings.openai_api_key
        )
        assistant_service = AssistantService(
            client=assistant_client,
            model=resolved_settings.openai_model,
        )

    async def close_resources() -> None:
        if assistant_client is not None:
            await assistant_client.close()
        if isinstance(user_repository, MongoUserRepository):
            user_repository.close()

    return AppContainer(
        settings=resolved_settings,
        auth_service=auth_service,
        assistant_service=assistant_service,
        close_resources=close_resources,
    )
