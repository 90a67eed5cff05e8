"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from scanmycarbs.api.app import create_app
from scanmycarbs.config import Settings
from scanmycarbs.containers import AppContainer
from scanmycarbs.domain.manual_foods import ManualFood
from scanmycarbs.domain.models import AuthenticatedUser, UserRecord
from scanmycarbs.domain.nutrition import CanonicalFood, FoodSource, MacroProfile
from scanmycarbs.domain.scans import ScanFoodLine, ScanRecord
from scanmycarbs.domain.stats import ScanTotalsRow
from scanmycarbs.domain.vision import Concept
from scanmycarbs.errors import AuthError
from scanmycarbs.services.auth import AuthService, TokenVerifier
from scanmycarbs.services.cache import FoodCache, InMemoryFoodCacheRepository
from scanmycarbs.services.manual_foods import ManualFoodRepository, ManualFoodService
from scanmycarbs.services.nutrition import FoodResolver, PackagedProductSource
from scanmycarbs.services.scans import ScanRepository, ScanService
from scanmycarbs.services.stats import StatsRepository, StatsService
from scanmycarbs.services.users import UserRepository, UserService
from scanmycarbs.services.vision import ConceptClassifier, ImageRecognitionService

TEST_USER_ID = UUID("11111111-1111-1111-1111-111111111111")
OTHER_USER_ID = UUID("22222222-2222-2222-2222-222222222222")
TEST_TOKEN = "test-token"
OTHER_TOKEN = "other-token"


def make_food(  # noqa: PLR0913
    external_id: str,
    name: str,
    source: FoodSource = FoodSource.NATIONAL_DB,
    calories: float = 100.0,
    carbs_g: float = 10.0,
    protein_g: float = 5.0,
    fat_g: float = 2.0,
    barcode: str | None = None,
) -> CanonicalFood:
    return CanonicalFood(
        external_id=external_id,
        name=name,
        source=source,
        macros=MacroProfile(
            calories=calories, protein_g=protein_g, fat_g=fat_g, carbs_g=carbs_g
        ),
        barcode=barcode,
    )


@dataclass
class FakeNutrientSource(PackagedProductSource):
    """Provider double that records every call."""

    source: FoodSource
    foods: list[CanonicalFood] = field(default_factory=list)
    healthy: bool = True
    search_calls: list[tuple[str, int]] = field(default_factory=list)
    id_calls: list[str] = field(default_factory=list)
    barcode_calls: list[str] = field(default_factory=list)
    advanced_calls: list[dict[str, object]] = field(default_factory=list)

    async def search(self, query: str, limit: int = 10) -> list[CanonicalFood]:
        self.search_calls.append((query, limit))
        needle = query.lower()
        return [food for food in self.foods if needle in food.name.lower()][:limit]

    async def search_advanced(  # noqa: PLR0913
        self,
        query: str,
        *,
        brands: str | None = None,
        categories: str | None = None,
        labels: str | None = None,
        limit: int = 20,
    ) -> list[CanonicalFood]:
        self.advanced_calls.append(
            {
                "query": query,
                "brands": brands,
                "categories": categories,
                "labels": labels,
                "limit": limit,
            }
        )
        needle = query.lower()
        return [food for food in self.foods if needle in food.name.lower()][:limit]

    async def get_by_id(self, food_id: str) -> CanonicalFood | None:
        self.id_calls.append(food_id)
        return next((f for f in self.foods if f.external_id == food_id), None)

    async def get_by_barcode(self, code: str) -> CanonicalFood | None:
        self.barcode_calls.append(code)
        return next((f for f in self.foods if f.barcode == code), None)

    async def health_check(self) -> bool:
        return self.healthy


@dataclass
class FakeClassifier(ConceptClassifier):
    """Classifier returning fixed concepts."""

    concepts: list[Concept] = field(default_factory=list)
    error: Exception | None = None
    calls: int = 0

    async def classify(self, image_bytes: bytes) -> list[Concept]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.concepts


@dataclass
class FakeTokenVerifier(TokenVerifier):
    """Maps known tokens to identities."""

    identities: dict[str, AuthenticatedUser] = field(default_factory=dict)

    def verify(self, token: str) -> AuthenticatedUser:
        identity = self.identities.get(token)
        if identity is None:
            raise AuthError("Invalid token")
        return identity


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    users: dict[UUID, UserRecord] = field(default_factory=dict)

    def get_user(self, user_id: UUID) -> UserRecord | None:
        return self.users.get(user_id)

    def find_by_email(self, email: str) -> UserRecord | None:
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, user_id: UUID, email: str | None) -> UserRecord:
        user = UserRecord(id=user_id, email=email, created_at=datetime.now(tz=UTC))
        self.users[user_id] = user
        return user

    def update_user(self, user_id: UUID, changes: dict[str, object]) -> UserRecord:
        user = replace(self.users[user_id], **changes)
        self.users[user_id] = user
        return user

    def delete_user(self, user_id: UUID) -> None:
        self.users.pop(user_id, None)


@dataclass
class InMemoryScanRepository(ScanRepository, StatsRepository):
    """In-memory scan store serving both scan and stats queries."""

    scans: dict[UUID, ScanRecord] = field(default_factory=dict)

    def create_scan(  # noqa: PLR0913
        self,
        user_id: UUID,
        scanned_at: datetime,
        meal_type: str | None,
        notes: str | None,
        image_url: str | None,
        totals: MacroProfile,
        foods: list[ScanFoodLine],
    ) -> ScanRecord:
        scan = ScanRecord(
            id=uuid4(),
            user_id=user_id,
            scanned_at=scanned_at,
            meal_type=meal_type,
            notes=notes,
            image_url=image_url,
            totals=totals,
            foods=list(foods),
        )
        self.scans[scan.id] = scan
        return scan

    def get_scan(self, scan_id: UUID) -> ScanRecord | None:
        return self.scans.get(scan_id)

    def list_scans(
        self,
        user_id: UUID,
        offset: int,
        limit: int,
        start: datetime | None,
        end: datetime | None,
    ) -> tuple[list[ScanRecord], int]:
        matching = sorted(
            (
                scan
                for scan in self.scans.values()
                if scan.user_id == user_id
                and (start is None or scan.scanned_at >= start)
                and (end is None or scan.scanned_at <= end)
            ),
            key=lambda scan: scan.scanned_at,
            reverse=True,
        )
        return matching[offset : offset + limit], len(matching)

    def update_scan(self, scan_id: UUID, changes: dict[str, object]) -> ScanRecord:
        scan = replace(self.scans[scan_id], **changes)
        self.scans[scan_id] = scan
        return scan

    def delete_scan(self, scan_id: UUID) -> None:
        self.scans.pop(scan_id, None)

    def delete_for_user(self, user_id: UUID) -> None:
        for scan_id in [s.id for s in self.scans.values() if s.user_id == user_id]:
            del self.scans[scan_id]

    def list_scan_totals(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[ScanTotalsRow]:
        return [
            ScanTotalsRow(scan_id=s.id, scanned_at=s.scanned_at, totals=s.totals)
            for s in sorted(self.scans.values(), key=lambda s: s.scanned_at)
            if s.user_id == user_id and start <= s.scanned_at <= end
        ]

    def add(
        self, user_id: UUID, scanned_at: datetime, totals: MacroProfile
    ) -> ScanRecord:
        """Seed a scan with fixed totals."""
        return self.create_scan(
            user_id=user_id,
            scanned_at=scanned_at,
            meal_type=None,
            notes=None,
            image_url=None,
            totals=totals,
            foods=[],
        )


@dataclass
class InMemoryManualFoodRepository(ManualFoodRepository):
    """In-memory manual food repository for tests."""

    foods: dict[UUID, ManualFood] = field(default_factory=dict)

    def create_food(self, user_id: UUID, payload: dict[str, object]) -> ManualFood:
        food = ManualFood(
            id=uuid4(),
            user_id=user_id,
            name=str(payload["name"]),
            brand=payload.get("brand"),
            category=payload.get("category"),
            barcode=payload.get("barcode"),
            macros=MacroProfile(
                calories=float(payload["calories"]),
                protein_g=float(payload["protein_g"]),
                fat_g=float(payload["fat_g"]),
                carbs_g=float(payload["carbs_g"]),
            ),
            created_at=datetime.now(tz=UTC),
        )
        self.foods[food.id] = food
        return food

    def update_food(self, food_id: UUID, payload: dict[str, object]) -> ManualFood:
        current = self.foods[food_id]
        macros = MacroProfile(
            calories=float(payload.get("calories", current.macros.calories)),
            protein_g=float(payload.get("protein_g", current.macros.protein_g)),
            fat_g=float(payload.get("fat_g", current.macros.fat_g)),
            carbs_g=float(payload.get("carbs_g", current.macros.carbs_g)),
        )
        text = {
            key: payload[key]
            for key in ("name", "brand", "category", "barcode")
            if key in payload
        }
        food = replace(current, macros=macros, **text)
        self.foods[food_id] = food
        return food

    def get_food(self, food_id: UUID) -> ManualFood | None:
        return self.foods.get(food_id)

    def list_foods(self, user_id: UUID) -> list[ManualFood]:
        return sorted(
            (f for f in self.foods.values() if f.user_id == user_id),
            key=lambda f: f.created_at,
            reverse=True,
        )

    def find_by_barcode(self, user_id: UUID, barcode: str) -> ManualFood | None:
        return next(
            (
                f
                for f in self.foods.values()
                if f.user_id == user_id and f.barcode == barcode
            ),
            None,
        )

    def delete_food(self, food_id: UUID) -> None:
        self.foods.pop(food_id, None)

    def delete_for_user(self, user_id: UUID) -> None:
        for food_id in [f.id for f in self.foods.values() if f.user_id == user_id]:
            del self.foods[food_id]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        clarifai_api_key="clarifai-key",
        openai_api_key="openai-key",
        food_cache_backend="memory",
        default_timezone="UTC",
    )


@pytest.fixture
def national_db() -> FakeNutrientSource:
    return FakeNutrientSource(
        source=FoodSource.NATIONAL_DB,
        foods=[
            make_food("13000", "Apple, raw", calories=52, carbs_g=14),
            make_food("9100", "Rice, cooked", calories=130, carbs_g=28),
        ],
    )


@pytest.fixture
def packaged_products() -> FakeNutrientSource:
    return FakeNutrientSource(
        source=FoodSource.PACKAGED_PRODUCT,
        foods=[
            make_food(
                "3017620422003",
                "Apple juice",
                source=FoodSource.PACKAGED_PRODUCT,
                calories=46,
                carbs_g=11,
                barcode="3017620422003",
            )
        ],
    )


@pytest.fixture
def cache_repository() -> InMemoryFoodCacheRepository:
    return InMemoryFoodCacheRepository()


@pytest.fixture
def manual_food_repository() -> InMemoryManualFoodRepository:
    return InMemoryManualFoodRepository()


@pytest.fixture
def scan_repository() -> InMemoryScanRepository:
    return InMemoryScanRepository()


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def classifier() -> FakeClassifier:
    return FakeClassifier(
        concepts=[Concept(name="apple", value=0.9), Concept(name="rock", value=0.2)]
    )


@pytest.fixture
def resolver(
    national_db: FakeNutrientSource,
    packaged_products: FakeNutrientSource,
    cache_repository: InMemoryFoodCacheRepository,
    manual_food_repository: InMemoryManualFoodRepository,
) -> FoodResolver:
    return FoodResolver(
        national_db=national_db,
        packaged_products=packaged_products,
        cache=FoodCache(cache_repository),
        manual_foods=ManualFoodService(manual_food_repository),
        max_limit=50,
    )


@pytest.fixture
def user_service(
    user_repository: InMemoryUserRepository,
    scan_repository: InMemoryScanRepository,
    manual_food_repository: InMemoryManualFoodRepository,
) -> UserService:
    return UserService(
        repository=user_repository,
        scan_repository=scan_repository,
        manual_food_repository=manual_food_repository,
    )


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    resolver: FoodResolver,
    user_service: UserService,
    scan_repository: InMemoryScanRepository,
    classifier: FakeClassifier,
) -> AppContainer:
    verifier = FakeTokenVerifier(
        identities={
            TEST_TOKEN: AuthenticatedUser(id=TEST_USER_ID, email="ana@example.com"),
            OTHER_TOKEN: AuthenticatedUser(id=OTHER_USER_ID, email="bo@example.com"),
        }
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        auth_service=AuthService(verifier=verifier, user_service=user_service),
        user_service=user_service,
        food_resolver=resolver,
        manual_food_service=resolver.manual_foods,
        scan_service=ScanService(scan_repository),
        stats_service=StatsService(scan_repository, default_timezone="UTC"),
        image_service=ImageRecognitionService(
            classifier=classifier, resolver=resolver
        ),
        close_resources=close_resources,
    )


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {TEST_TOKEN}"}


@pytest.fixture
def other_auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {OTHER_TOKEN}"}
