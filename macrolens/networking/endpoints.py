"""Typed catalog of MacroLens API routes grouped by resource family."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from enum import unique
from string import Formatter
from typing import NamedTuple
from typing import Union

from macrolens.core.config import AppSettings


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @property
    def is_read(self) -> bool:
        return self is HTTPMethod.GET


class Route(NamedTuple):
    template: str
    method: HTTPMethod

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return tuple(name for _, name, _, _ in Formatter().parse(self.template) if name)


class ResourceFamily(str, Enum):
    AUTH = "auth"
    USERS = "users"
    FOOD = "food"
    FOOD_LOGS = "food_logs"
    NUTRITION = "nutrition"
    RECIPES = "recipes"
    MEAL_PLANS = "meal_plans"
    PROGRESS = "progress"
    HEALTH = "health"


@unique
class AuthOperation(Enum):
    REGISTER = Route("/auth/register", HTTPMethod.POST)
    LOGIN = Route("/auth/login", HTTPMethod.POST)
    REFRESH_TOKEN = Route("/auth/refresh", HTTPMethod.POST)
    LOGOUT = Route("/auth/logout", HTTPMethod.POST)
    VERIFY_EMAIL = Route("/auth/verify-email", HTTPMethod.POST)
    RESET_PASSWORD = Route("/auth/reset-password", HTTPMethod.POST)
    ME = Route("/auth/me", HTTPMethod.GET)


@unique
class UserOperation(Enum):
    PROFILE = Route("/users/profile", HTTPMethod.GET)
    UPDATE_PROFILE = Route("/users/profile", HTTPMethod.PUT)
    DELETE_ACCOUNT = Route("/users/account", HTTPMethod.DELETE)
    PREFERENCES = Route("/users/preferences", HTTPMethod.GET)
    UPDATE_PREFERENCES = Route("/users/preferences", HTTPMethod.PUT)


@unique
class FoodOperation(Enum):
    SEARCH = Route("/food/search", HTTPMethod.GET)
    DETAILS = Route("/food/{food_id}", HTTPMethod.GET)
    SCAN = Route("/food/scan", HTTPMethod.POST)
    CUSTOM = Route("/food/custom", HTTPMethod.POST)
    POPULAR = Route("/food/popular", HTTPMethod.GET)


@unique
class FoodLogOperation(Enum):
    LIST = Route("/food/logs", HTTPMethod.GET)
    CREATE = Route("/food/log", HTTPMethod.POST)
    DETAILS = Route("/food/logs/{log_id}", HTTPMethod.GET)
    UPDATE = Route("/food/logs/{log_id}", HTTPMethod.PUT)
    DELETE = Route("/food/logs/{log_id}", HTTPMethod.DELETE)
    TODAY = Route("/food/logs/today", HTTPMethod.GET)
    BY_DATE = Route("/food/logs/date/{date}", HTTPMethod.GET)
    DAILY_SUMMARY = Route("/food/logs/daily-summary", HTTPMethod.GET)


@unique
class NutritionOperation(Enum):
    GOALS = Route("/nutrition/goals", HTTPMethod.GET)
    UPDATE_GOALS = Route("/nutrition/goals", HTTPMethod.PUT)
    DAILY = Route("/nutrition/daily", HTTPMethod.GET)
    MACRO_BREAKDOWN = Route("/nutrition/macros", HTTPMethod.GET)


@unique
class RecipeOperation(Enum):
    LIST = Route("/recipes", HTTPMethod.GET)
    SEARCH = Route("/recipes/search", HTTPMethod.GET)
    DETAILS = Route("/recipes/{recipe_id}", HTTPMethod.GET)
    CREATE = Route("/recipes", HTTPMethod.POST)
    UPDATE = Route("/recipes/{recipe_id}", HTTPMethod.PUT)
    DELETE = Route("/recipes/{recipe_id}", HTTPMethod.DELETE)
    FAVORITES = Route("/recipes/favorites", HTTPMethod.GET)
    TOGGLE_FAVORITE = Route("/recipes/{recipe_id}/favorite", HTTPMethod.POST)


@unique
class MealPlanOperation(Enum):
    LIST = Route("/meal-plans", HTTPMethod.GET)
    GENERATE = Route("/meal-plans/generate", HTTPMethod.POST)
    DETAILS = Route("/meal-plans/{plan_id}", HTTPMethod.GET)
    UPDATE = Route("/meal-plans/{plan_id}", HTTPMethod.PUT)
    DELETE = Route("/meal-plans/{plan_id}", HTTPMethod.DELETE)
    ACTIVE = Route("/meal-plans/active", HTTPMethod.GET)


@unique
class ProgressOperation(Enum):
    LIST = Route("/progress", HTTPMethod.GET)
    CREATE = Route("/progress", HTTPMethod.POST)
    HISTORY = Route("/progress/history", HTTPMethod.GET)
    STATS = Route("/progress/stats", HTTPMethod.GET)


@unique
class HealthOperation(Enum):
    SYNC = Route("/health/sync", HTTPMethod.POST)
    DATA = Route("/health/data", HTTPMethod.GET)


Operation = Union[
    AuthOperation,
    UserOperation,
    FoodOperation,
    FoodLogOperation,
    NutritionOperation,
    RecipeOperation,
    MealPlanOperation,
    ProgressOperation,
    HealthOperation,
]

_FAMILIES: dict[type[Enum], ResourceFamily] = {
    AuthOperation: ResourceFamily.AUTH,
    UserOperation: ResourceFamily.USERS,
    FoodOperation: ResourceFamily.FOOD,
    FoodLogOperation: ResourceFamily.FOOD_LOGS,
    NutritionOperation: ResourceFamily.NUTRITION,
    RecipeOperation: ResourceFamily.RECIPES,
    MealPlanOperation: ResourceFamily.MEAL_PLANS,
    ProgressOperation: ResourceFamily.PROGRESS,
    HealthOperation: ResourceFamily.HEALTH,
}


@dataclass(frozen=True)
class Endpoint:
    """One catalogued route with its path parameters bound.

    Use :meth:`Endpoint.of` to construct; parameters must match the
    placeholders of the operation's template exactly.
    """

    operation: Operation
    path_params: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        if type(self.operation) not in _FAMILIES:
            raise TypeError(f"Unknown endpoint operation {self.operation!r}")

        expected = set(self.route.parameter_names)
        supplied = {name for name, _ in self.path_params}
        missing = expected - supplied
        if missing:
            raise TypeError(
                f"{self.operation.name} requires path parameter(s): {', '.join(sorted(missing))}"
            )
        unexpected = supplied - expected
        if unexpected:
            raise TypeError(
                f"{self.operation.name} does not accept path parameter(s): {', '.join(sorted(unexpected))}"
            )

    @classmethod
    def of(cls, operation: Operation, **path_params: object) -> Endpoint:
        return cls(
            operation=operation,
            path_params=tuple((name, str(value)) for name, value in sorted(path_params.items())),
        )

    @property
    def route(self) -> Route:
        return self.operation.value

    @property
    def family(self) -> ResourceFamily:
        return _FAMILIES[type(self.operation)]

    @property
    def method(self) -> HTTPMethod:
        return self.route.method

    @property
    def path(self) -> str:
        """Template with parameters substituted verbatim, no escaping."""
        return self.route.template.format_map(dict(self.path_params))

    def full_url(self, settings: AppSettings) -> str:
        return settings.api_base_url + self.path
