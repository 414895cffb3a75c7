"""Shared mixins for incident views."""

from typing import Any

from django.http import JsonResponse


class JSONResponseMixin:
    """Mixin for JSON responses."""

    def json_response(self, data: Any, status: int = 200, safe: bool = True) -> JsonResponse:
        return JsonResponse(data, status=status, safe=safe)

    def error_response(self, message: str, status: int = 400) -> JsonResponse:
        return JsonResponse({"status": "error", "message": message}, status=status)

    def int_param(self, request, name: str, default: int, minimum: int = 1, maximum: int = 24 * 90) -> int:
        """
        Read a bounded integer query parameter.

        Raises:
            ValueError: If the value is not an integer or out of range.
        """
        raw = request.GET.get(name)
        if raw in (None, ""):
            return default
        value = int(raw)
        if value < minimum or value > maximum:
            raise ValueError(f"{name} must be between {minimum} and {maximum}")
        return value
