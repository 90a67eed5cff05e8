"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import Client, create_client

from scanmycarbs.adapters.ciqual_client import HttpxCiqualClient
from scanmycarbs.adapters.clarifai_client import HttpxClarifaiClassifier
from scanmycarbs.adapters.openai_vision_client import OpenAIConceptClassifier
from scanmycarbs.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient
from scanmycarbs.adapters.supabase_auth import SupabaseTokenVerifier
from scanmycarbs.adapters.supabase_food_cache_repository import (
    SupabaseFoodCacheRepository,
)
from scanmycarbs.adapters.supabase_manual_food_repository import (
    SupabaseManualFoodRepository,
)
from scanmycarbs.adapters.supabase_scan_repository import SupabaseScanRepository
from scanmycarbs.adapters.supabase_stats_repository import SupabaseStatsRepository
from scanmycarbs.adapters.supabase_user_repository import SupabaseUserRepository
from scanmycarbs.config import Settings, parse_vision_provider
from scanmycarbs.services.auth import AuthService
from scanmycarbs.services.cache import (
    FoodCache,
    FoodCacheRepository,
    InMemoryFoodCacheRepository,
)
from scanmycarbs.services.manual_foods import ManualFoodService
from scanmycarbs.services.nutrition import FoodResolver
from scanmycarbs.services.scans import ScanService
from scanmycarbs.services.stats import StatsService
from scanmycarbs.services.users import UserService
from scanmycarbs.services.vision import ImageRecognitionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    user_service: UserService
    food_resolver: FoodResolver
    manual_food_service: ManualFoodService
    scan_service: ScanService
    stats_service: StatsService
    image_service: ImageRecognitionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    user_repository = SupabaseUserRepository(supabase_client)
    scan_repository = SupabaseScanRepository(supabase_client)
    manual_food_repository = SupabaseManualFoodRepository(supabase_client)
    stats_repository = SupabaseStatsRepository(supabase_client)

    ciqual_client = HttpxCiqualClient.create(
        base_url=resolved_settings.ciqual_base_url,
        user_agent=resolved_settings.user_agent,
        timeout_seconds=resolved_settings.http_timeout_seconds,
        health_timeout_seconds=resolved_settings.health_timeout_seconds,
    )
    openfoodfacts_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.openfoodfacts_base_url,
        user_agent=resolved_settings.user_agent,
        country=resolved_settings.openfoodfacts_country or None,
        timeout_seconds=resolved_settings.http_timeout_seconds,
        health_timeout_seconds=resolved_settings.health_timeout_seconds,
    )
    classifier = _build_classifier(resolved_settings)

    manual_food_service = ManualFoodService(manual_food_repository)
    food_resolver = FoodResolver(
        national_db=ciqual_client,
        packaged_products=openfoodfacts_client,
        cache=FoodCache(_build_cache_repository(resolved_settings, supabase_client)),
        manual_foods=manual_food_service,
        max_limit=resolved_settings.max_search_limit,
    )
    user_service = UserService(
        repository=user_repository,
        scan_repository=scan_repository,
        manual_food_repository=manual_food_repository,
    )
    auth_service = AuthService(
        verifier=SupabaseTokenVerifier(supabase_client),
        user_service=user_service,
    )
    image_service = ImageRecognitionService(
        classifier=classifier, resolver=food_resolver
    )

    async def close_resources() -> None:
        await ciqual_client.close()
        await openfoodfacts_client.close()
        await classifier.close()

    return AppContainer(
        settings=resolved_settings,
        auth_service=auth_service,
        user_service=user_service,
        food_resolver=food_resolver,
        manual_food_service=manual_food_service,
        scan_service=ScanService(scan_repository),
        stats_service=StatsService(
            stats_repository, default_timezone=resolved_settings.default_timezone
        ),
        image_service=image_service,
        close_resources=close_resources,
    )


def _build_classifier(
    settings: Settings,
) -> HttpxClarifaiClassifier | OpenAIConceptClassifier:
    provider = parse_vision_provider(settings.vision_provider)
    if provider == "openai":
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required for the openai provider")
        return OpenAIConceptClassifier.create(
            settings.openai_api_key, settings.openai_model
        )
    if not settings.clarifai_api_key:
        raise ValueError("CLARIFAI_API_KEY is required for the clarifai provider")
    return HttpxClarifaiClassifier.create(
        api_key=settings.clarifai_api_key,
        base_url=settings.clarifai_base_url,
        model_id=settings.clarifai_model_id,
        timeout_seconds=settings.http_timeout_seconds,
    )


def _build_cache_repository(
    settings: Settings, client: Client
) -> FoodCacheRepository:
    backend = settings.food_cache_backend.strip().lower()
    if backend == "memory":
        return InMemoryFoodCacheRepository()
    if backend == "supabase":
        return SupabaseFoodCacheRepository(client)
    raise ValueError(f"Unsupported food cache backend: {settings.food_cache_backend!r}")
