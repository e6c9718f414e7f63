# common/tests.py

import os
from unittest import mock

import structlog
from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase, override_settings
from rest_framework import serializers, status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.test import APIRequestFactory
from rest_framework.views import APIView
from structlog.testing import capture_logs

from common.exceptions import _flatten_errors
from common.logging import configure_logging
from storefront_api.settings import env_float, env_json


class BoomView(APIView):
    authentication_classes = []
    permission_classes = []

    def get(self, request):
        raise RuntimeError("boom")


class MissingView(APIView):
    authentication_classes = []
    permission_classes = []
    error_message = "Product not found"

    def get(self, request):
        raise NotFound("No such variant.")


class _QuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)


class ValidatingView(APIView):
    authentication_classes = []
    permission_classes = []

    def post(self, request):
        serializer = _QuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(serializer.validated_data)


class ApiExceptionHandlerTests(SimpleTestCase):
    """Tests for the {message, error} error body."""

    def setUp(self):
        self.factory = APIRequestFactory()

    def test_unhandled_exception_becomes_server_error(self):
        with capture_logs() as logs:
            response = BoomView.as_view()(self.factory.get("/boom/"))
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {"message": "Server error", "error": "boom"})
        self.assertEqual(logs[0]["event"], "api_unhandled_exception")
        self.assertEqual(logs[0]["log_level"], "error")

    @override_settings(DEBUG=True)
    def test_stack_included_in_debug(self):
        response = BoomView.as_view()(self.factory.get("/boom/"))
        self.assertIn("RuntimeError: boom", response.data["stack"])

    def test_view_error_message(self):
        with capture_logs() as logs:
            response = MissingView.as_view()(self.factory.get("/missing/"))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(
            response.data,
            {"message": "Product not found", "error": "No such variant."},
        )
        self.assertEqual(logs[0]["event"], "api_client_error")
        self.assertEqual(logs[0]["log_level"], "warning")

    def test_validation_errors_flattened(self):
        request = self.factory.post("/validate/", {"quantity": 0}, format="json")
        response = ValidatingView.as_view()(request)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Invalid request")
        self.assertEqual(
            response.data["error"],
            "quantity: Ensure this value is greater than or equal to 1.",
        )

    def test_flatten_nested_errors(self):
        detail = {"items": [{"price": ["Required."]}], "zip": ["Too long.", "Invalid."]}
        self.assertEqual(
            _flatten_errors(detail),
            "items: price: Required.; zip: Too long. Invalid.",
        )


class ConfigureLoggingTests(SimpleTestCase):

    def tearDown(self):
        configure_logging()

    def test_json_renderer(self):
        configure_logging(level="warning", json=True)
        processors = structlog.get_config()["processors"]
        self.assertIsInstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer(self):
        configure_logging()
        processors = structlog.get_config()["processors"]
        self.assertIsInstance(processors[-1], structlog.dev.ConsoleRenderer)


class EnvSettingsTests(SimpleTestCase):
    """Numeric and JSON settings read from the environment."""

    def test_env_float(self):
        with mock.patch.dict(os.environ, {"PRICE_MULTIPLIER": "3.1"}):
            self.assertEqual(env_float("PRICE_MULTIPLIER", "2.8"), 3.1)
        with mock.patch.dict(os.environ, {"PRICE_MULTIPLIER": ""}):
            self.assertEqual(env_float("PRICE_MULTIPLIER", "2.8"), 2.8)

    def test_env_float_rejects_malformed_value(self):
        for value in ("abc", "inf", "nan"):
            with mock.patch.dict(os.environ, {"PRICE_MULTIPLIER": value}):
                with self.assertRaisesMessage(ImproperlyConfigured, "PRICE_MULTIPLIER"):
                    env_float("PRICE_MULTIPLIER", "2.8")

    def test_env_json(self):
        with mock.patch.dict(os.environ, {"PRICING_FEES": '{"inside_label": 2.5}'}):
            self.assertEqual(env_json("PRICING_FEES"), {"inside_label": 2.5})
        with mock.patch.dict(os.environ, {"PRICING_FEES": ""}):
            self.assertEqual(env_json("PRICING_FEES"), {})

    def test_env_json_rejects_malformed_value(self):
        with mock.patch.dict(os.environ, {"PRICING_FEES": "{inside_label: 2.5"}):
            with self.assertRaisesMessage(ImproperlyConfigured, "PRICING_FEES"):
                env_json("PRICING_FEES")
