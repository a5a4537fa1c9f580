"""HTTP client for the clinical review endpoints.

Used by the admin review console (and scripts) to talk to a running service.
Failures are not retried: a transport problem raises :class:`ReviewNetworkError`
and any non-2xx response raises :class:`ReviewServerError` carrying the
server's ``error`` message, so the caller can tell the user to try again.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from app.core.config import settings
from app.models.symptom_review_status import ReviewState
from app.schemas.clinical_review import ClinicalReviewDataOut, ReviewStatusOut, ReviewSummaryOut
from app.schemas.symptoms import EffectiveSymptomOut
from app.services.symptom_visibility_service import VisibilityAction

logger = logging.getLogger(__name__)


class ReviewClientError(Exception):
    pass


class ReviewNetworkError(ReviewClientError):
    pass


class ReviewServerError(ReviewClientError):
    def __init__(self, status_code: int, message: str, payload: Optional[dict] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload or {}


class ClinicalReviewClient:
    def __init__(
        self,
        base_url: str,
        user_id: str,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._http = httpx.Client(
            base_url=base_url,
            headers={settings.actor_header: user_id},
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ClinicalReviewClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> dict:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Request failed method=%s path=%s error=%s", method, path, exc)
            raise ReviewNetworkError(f"Network error calling {path}") from exc

        if response.is_success:
            return response.json()

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        message = payload.get("error") if isinstance(payload, dict) else None
        logger.warning("Request rejected method=%s path=%s status=%s error=%s", method, path, response.status_code, message)
        raise ReviewServerError(response.status_code, message or f"Request failed ({response.status_code})", payload)

    def effective_symptoms(self, surgery_id: str, *, include_disabled: bool) -> list[EffectiveSymptomOut]:
        data = self._request(
            "GET",
            "/api/effectiveSymptoms",
            params={"surgeryId": surgery_id, "includeDisabled": "1" if include_disabled else "0"},
        )
        return [EffectiveSymptomOut.model_validate(s) for s in data.get("symptoms") or []]

    def clinical_review_data(self, surgery_id: str) -> ClinicalReviewDataOut:
        data = self._request("GET", "/api/admin/clinical-review-data", params={"surgeryId": surgery_id})
        return ClinicalReviewDataOut.model_validate(data)

    def update_review_status(
        self,
        surgery_id: str,
        symptom_id: str,
        age_group: Optional[str],
        new_status: ReviewState,
        review_note: Optional[str] = None,
    ) -> ReviewStatusOut:
        body: dict[str, Any] = {
            "surgeryId": surgery_id,
            "symptomId": symptom_id,
            "ageGroup": age_group or None,
            "newStatus": new_status.value,
        }
        if review_note:
            body["reviewNote"] = review_note
        data = self._request("POST", "/api/admin/review-status", json=body)
        return ReviewStatusOut.model_validate(data)

    def reset_all(self, surgery_id: str) -> int:
        data = self._request("POST", "/api/admin/clinical-review", json={"action": "RESET_ALL", "surgeryId": surgery_id})
        return int(data.get("updated") or 0)

    def bulk_approve(self, surgery_id: str, search: Optional[str] = None) -> int:
        body: dict[str, Any] = {"surgeryId": surgery_id}
        if search and search.strip():
            body["search"] = search
        data = self._request("POST", "/api/admin/clinical-review/bulk-approve", json=body)
        return int(data.get("approvedCount") or 0)

    def set_visibility(
        self,
        action: VisibilityAction,
        surgery_id: str,
        *,
        base_symptom_id: Optional[str] = None,
        custom_symptom_id: Optional[str] = None,
    ) -> None:
        body: dict[str, Any] = {"action": action.value, "surgeryId": surgery_id}
        if base_symptom_id:
            body["baseSymptomId"] = base_symptom_id
        if custom_symptom_id:
            body["customSymptomId"] = custom_symptom_id
        self._request("PATCH", "/api/surgerySymptoms", json=body)

    def complete_review(self, surgery_id: str) -> dict:
        return self._request("POST", "/api/admin/complete-review", json={"surgeryId": surgery_id})

    def request_rereview(self, surgery_id: str) -> dict:
        return self._request("POST", "/api/admin/request-rereview", json={"surgeryId": surgery_id})

    def review_summary(self, surgery_id: str) -> ReviewSummaryOut:
        data = self._request("GET", "/api/admin/clinical-review-summary", params={"surgeryId": surgery_id})
        return ReviewSummaryOut.model_validate(data)
