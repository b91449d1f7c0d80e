from django.http import Http404
from django.test import SimpleTestCase, TestCase
from rest_framework import exceptions as drf_exceptions
from rest_framework.test import APIClient

from apps.core.exceptions import (
    Conflict, Forbidden, InvalidState, NotFound, ValidationFailed, api_exception_handler,
)


class HealthCheckTest(TestCase):

    def test_health_is_public(self):
        response = APIClient().get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")
        self.assertIn("timestamp", response.json())


class ExceptionHandlerTest(SimpleTestCase):

    def handle(self, exc):
        return api_exception_handler(exc, {"view": None})

    def test_domain_errors_map_to_status_codes(self):
        cases = [
            (NotFound("Cohort not found"), 404),
            (Conflict("Course already in cohort"), 409),
            (InvalidState("Cohort is not joinable"), 409),
            (ValidationFailed("Grade must be between 0 and 10"), 422),
            (Forbidden(), 403),
        ]
        for exc, code in cases:
            with self.subTest(exc=exc):
                response = self.handle(exc)
                self.assertEqual(response.status_code, code)
                self.assertEqual(response.data, {"error": exc.message})

    def test_forbidden_default_message(self):
        self.assertEqual(self.handle(Forbidden()).data, {"error": "Insufficient permissions"})

    def test_serializer_errors_are_422_with_details(self):
        response = self.handle(drf_exceptions.ValidationError({"email": ["This field is required."]}))

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.data["error"], "Validation failed")
        self.assertIn("email", response.data["details"])

    def test_unauthenticated_is_401(self):
        response = self.handle(drf_exceptions.NotAuthenticated())

        self.assertEqual(response.status_code, 401)
        self.assertIn("error", response.data)

    def test_http404(self):
        response = self.handle(Http404("secret lookup detail"))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {"error": "Not found"})

    def test_other_drf_errors_keep_status(self):
        response = self.handle(drf_exceptions.MethodNotAllowed("DELETE"))

        self.assertEqual(response.status_code, 405)
        self.assertEqual(set(response.data), {"error"})

    def test_unexpected_errors_do_not_leak(self):
        with self.assertLogs("apps.core.exceptions", level="ERROR"):
            response = self.handle(RuntimeError("database password is hunter2"))

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {"error": "Internal server error"})
