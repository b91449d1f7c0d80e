import uuid
from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.urls import reverse
from django.utils import timezone

from apps.audit.models import AuditLog
from apps.core.exceptions import Conflict, Forbidden, NotFound, ValidationFailed
from apps.learn.models import LearnerProgress
from apps.learn.services import enrollment
from apps.reviews import services
from apps.reviews.models import Appeal, DropRecommendation, GracePeriod, InstructorNote

User = get_user_model()


@pytest.fixture
def enrolled(learner, instructor, cohort, course):
    """Learner with a cohort-level row and a course-level row in `cohort`."""
    cohort_row = enrollment.join_cohort(learner, cohort.id)
    request = enrollment.apply_to_course(learner, cohort.id, course.id)
    _, course_row = enrollment.handle_application(request.id, "approve", instructor)
    return cohort_row, course_row


@pytest.fixture
def recommendation(instructor, learner, cohort, enrolled):
    return services.create_drop_recommendation(instructor, learner.id, cohort.id, "No activity", "3 missed tasks")


@pytest.mark.django_db
class TestDropRecommendation:

    def test_create(self, recommendation, instructor, learner):
        assert recommendation.status == DropRecommendation.PENDING
        assert recommendation.instructor == instructor
        assert AuditLog.objects.filter(action="drop_recommendation.created", target_user=learner).exists()

    def test_only_instructors_recommend(self, admin_user, learner, cohort):
        with pytest.raises(Forbidden):
            services.create_drop_recommendation(admin_user, learner.id, cohort.id, "reason")

    def test_unknown_learner(self, instructor, cohort):
        with pytest.raises(NotFound):
            services.create_drop_recommendation(instructor, 424242, cohort.id, "reason")

    def test_approve_drops_learner_and_progress(self, recommendation, admin_user, learner, cohort, enrolled):
        services.review_drop_recommendation(recommendation.id, "approved", "Confirmed", admin_user)

        recommendation.refresh_from_db()
        learner.refresh_from_db()
        assert recommendation.status == DropRecommendation.APPROVED
        assert recommendation.reviewed_by == admin_user
        assert recommendation.reviewed_at is not None
        assert recommendation.review_notes == "Confirmed"
        assert learner.status == User.STATUS_DROPPED
        assert learner.active_cohort is None
        for row in enrolled:
            row.refresh_from_db()
            assert row.status == LearnerProgress.DROPPED
        assert set(recommendation.dropped_progress.all()) == set(enrolled)

    def test_approve_leaves_other_cohorts_alone(self, recommendation, admin_user, learner, other_cohort, course):
        elsewhere = LearnerProgress.objects.create(learner=learner, cohort=other_cohort, course=course)

        services.review_drop_recommendation(recommendation.id, "approved", "", admin_user)

        elsewhere.refresh_from_db()
        assert elsewhere.status == LearnerProgress.ON_TRACK

    def test_reject_has_no_side_effects(self, recommendation, admin_user, learner, enrolled):
        services.review_drop_recommendation(recommendation.id, "rejected", "Give them time", admin_user)

        learner.refresh_from_db()
        assert learner.status == User.STATUS_ACTIVE
        assert all(
            LearnerProgress.objects.get(id=row.id).status == LearnerProgress.ON_TRACK for row in enrolled
        )

    def test_second_review_conflicts(self, recommendation, admin_user):
        services.review_drop_recommendation(recommendation.id, "rejected", "", admin_user)
        with pytest.raises(Conflict, match="already reviewed"):
            services.review_drop_recommendation(recommendation.id, "approved", "", admin_user)

    @pytest.mark.parametrize("status", ["pending", "appealed", "maybe"])
    def test_invalid_outcome(self, recommendation, admin_user, status):
        with pytest.raises(ValidationFailed):
            services.review_drop_recommendation(recommendation.id, status, "", admin_user)

    def test_instructor_cannot_review(self, recommendation, instructor):
        with pytest.raises(Forbidden):
            services.review_drop_recommendation(recommendation.id, "approved", "", instructor)

    def test_unknown_recommendation(self, admin_user):
        with pytest.raises(NotFound):
            services.review_drop_recommendation(uuid.uuid4(), "approved", "", admin_user)


@pytest.mark.django_db
class TestAppeal:

    @pytest.fixture
    def approved(self, recommendation, admin_user):
        return services.review_drop_recommendation(recommendation.id, "approved", "", admin_user)

    def test_filing_marks_recommendation_appealed(self, approved, learner):
        appeal = services.file_appeal(learner, approved.id, "I was travelling")

        approved.refresh_from_db()
        assert appeal.status == Appeal.PENDING
        assert appeal.cohort == approved.cohort
        assert approved.status == DropRecommendation.APPEALED

    def test_only_the_named_learner_may_appeal(self, approved, other_learner):
        with pytest.raises(Forbidden):
            services.file_appeal(other_learner, approved.id, "Not me")

    def test_rejected_recommendation_cannot_be_appealed(self, recommendation, admin_user, learner):
        services.review_drop_recommendation(recommendation.id, "rejected", "", admin_user)
        with pytest.raises(Conflict):
            services.file_appeal(learner, recommendation.id, "Why")

    def test_one_pending_appeal_per_recommendation(self, approved, learner):
        services.file_appeal(learner, approved.id, "First")
        with pytest.raises(Conflict):
            services.file_appeal(learner, approved.id, "Second")
        assert Appeal.objects.count() == 1

    def test_approve_restores_learner_in_the_appealed_cohort(self, approved, learner, admin_user, enrolled,
                                                             other_cohort, course, cohort):
        # an older drop elsewhere must stay dropped
        elsewhere = LearnerProgress.objects.create(
            learner=learner, cohort=other_cohort, course=course, status=LearnerProgress.DROPPED
        )
        appeal = services.file_appeal(learner, approved.id, "Travelling")

        services.review_appeal(appeal.id, "approved", "Welcome back", admin_user)

        learner.refresh_from_db()
        elsewhere.refresh_from_db()
        assert learner.status == User.STATUS_ACTIVE
        assert learner.active_cohort == cohort
        for row in enrolled:
            row.refresh_from_db()
            assert row.status == LearnerProgress.ON_TRACK
        assert elsewhere.status == LearnerProgress.DROPPED
        assert Appeal.objects.get(id=appeal.id).reviewed_by == admin_user

    def test_reinstatement_closes_a_cohort_joined_after_the_drop(self, approved, learner, admin_user, cohort,
                                                                 other_cohort):
        autumn_row = enrollment.join_cohort(learner, other_cohort.id)
        appeal = services.file_appeal(learner, approved.id, "Travelling")

        services.review_appeal(appeal.id, "approved", "", admin_user)

        learner.refresh_from_db()
        autumn_row.refresh_from_db()
        live_cohorts = set(
            LearnerProgress.objects.for_learner(learner).active().values_list("cohort_id", flat=True)
        )
        assert live_cohorts == {cohort.id}
        assert autumn_row.status == LearnerProgress.DROPPED
        assert learner.active_cohort == cohort
        entry = AuditLog.objects.get(action="appeal.approved")
        assert entry.details["droppedProgressIds"] == [str(autumn_row.id)]
        assert len(entry.details["restoredProgressIds"]) == 2

    def test_reject_returns_recommendation_to_approved(self, approved, learner, admin_user):
        appeal = services.file_appeal(learner, approved.id, "Please")

        services.review_appeal(appeal.id, "rejected", "No", admin_user)

        approved.refresh_from_db()
        learner.refresh_from_db()
        assert approved.status == DropRecommendation.APPROVED
        assert learner.status == User.STATUS_DROPPED

    def test_reject_returns_unreviewed_recommendation_to_pending(self, recommendation, learner, admin_user):
        appeal = services.file_appeal(learner, recommendation.id, "Pre-emptive")
        services.review_appeal(appeal.id, "rejected", "", admin_user)

        recommendation.refresh_from_db()
        assert recommendation.status == DropRecommendation.PENDING

    def test_recommendation_under_appeal_cannot_be_reviewed(self, recommendation, learner, admin_user):
        services.file_appeal(learner, recommendation.id, "Pre-emptive")

        with pytest.raises(Conflict, match="pending appeal"):
            services.review_drop_recommendation(recommendation.id, "approved", "", admin_user)

    def test_upheld_appeal_closes_unreviewed_recommendation(self, recommendation, learner, admin_user, cohort,
                                                            enrolled):
        appeal = services.file_appeal(learner, recommendation.id, "Pre-emptive")

        services.review_appeal(appeal.id, "approved", "Not warranted", admin_user)

        recommendation.refresh_from_db()
        learner.refresh_from_db()
        assert recommendation.status == DropRecommendation.REJECTED
        assert recommendation.reviewed_by == admin_user
        assert recommendation.review_notes == "Not warranted"
        assert learner.status == User.STATUS_ACTIVE
        assert learner.active_cohort == cohort
        assert all(
            LearnerProgress.objects.get(id=row.id).status == LearnerProgress.ON_TRACK for row in enrolled
        )

    def test_appeal_reviewed_twice_conflicts(self, approved, learner, admin_user):
        appeal = services.file_appeal(learner, approved.id, "Please")
        services.review_appeal(appeal.id, "approved", "", admin_user)
        with pytest.raises(Conflict):
            services.review_appeal(appeal.id, "rejected", "", admin_user)

    def test_new_appeal_after_rejection(self, approved, learner, admin_user):
        first = services.file_appeal(learner, approved.id, "Please")
        services.review_appeal(first.id, "rejected", "", admin_user)

        second = services.file_appeal(learner, approved.id, "Please, with evidence")
        assert second.is_pending

    def test_audit_trail(self, approved, learner, admin_user):
        appeal = services.file_appeal(learner, approved.id, "Please")
        services.review_appeal(appeal.id, "approved", "", admin_user)

        actions = list(AuditLog.objects.order_by("timestamp", "id").values_list("action", flat=True))
        assert actions[-3:] == ["drop_recommendation.approved", "appeal.filed", "appeal.approved"]


@pytest.mark.django_db
class TestGracePeriod:

    def test_grant(self, admin_user, learner, cohort):
        before = timezone.now()
        grace = services.grant_grace_period(admin_user, learner.id, cohort.id, extension_days=5, reason="Illness")

        assert grace.granted_by == admin_user
        assert grace.new_deadline == grace.expires_at
        assert grace.new_deadline - before >= timedelta(days=5)
        assert grace.original_deadline >= before

    def test_defaults_to_cohort_grace_days(self, admin_user, learner, cohort):
        grace = services.grant_grace_period(admin_user, learner.id, cohort.id)
        assert grace.extension_days == cohort.grace_period_days == 3

    def test_append_only(self, admin_user, learner, cohort):
        services.grant_grace_period(admin_user, learner.id, cohort.id, extension_days=1)
        services.grant_grace_period(admin_user, learner.id, cohort.id, extension_days=2)
        assert GracePeriod.objects.filter(learner=learner).count() == 2

    def test_instructor_cannot_grant(self, instructor, learner, cohort):
        with pytest.raises(Forbidden):
            services.grant_grace_period(instructor, learner.id, cohort.id)


@pytest.mark.django_db
class TestReviewEndpoints:

    def test_full_cycle_over_http(self, api_client, instructor, admin_user, learner, cohort, enrolled):
        created = api_client(instructor).post(reverse("reviews:drop_recommendation_list"), {
            "learnerId": learner.id, "cohortId": str(cohort.id), "reason": "Inactive", "evidence": "logs",
        }, format="json")
        assert created.status_code == 201
        rec_id = created.json()["id"]

        listed = api_client(admin_user).get(reverse("reviews:drop_recommendation_list")).json()
        assert [r["id"] for r in listed] == [rec_id]

        reviewed = api_client(admin_user).put(
            reverse("reviews:drop_recommendation_review", args=[rec_id]),
            {"status": "approved", "reviewNotes": "ok"}, format="json",
        )
        assert reviewed.status_code == 200
        assert len(reviewed.json()["droppedProgressIds"]) == 2

        again = api_client(admin_user).put(
            reverse("reviews:drop_recommendation_review", args=[rec_id]), {"status": "rejected"}, format="json"
        )
        assert again.status_code == 409
        assert again.json() == {"error": "Drop recommendation already reviewed"}

        appeal = api_client(learner).post(reverse("reviews:appeal_list"), {
            "dropRecommendationId": rec_id, "reason": "I was ill",
        }, format="json")
        assert appeal.status_code == 201

        pending = api_client(admin_user).get(reverse("reviews:appeal_list")).json()
        assert [a["id"] for a in pending] == [appeal.json()["id"]]

        decided = api_client(admin_user).put(
            reverse("reviews:appeal_review", args=[appeal.json()["id"]]), {"status": "approved"}, format="json"
        )
        assert decided.status_code == 200
        assert decided.json()["status"] == "approved"
        learner.refresh_from_db()
        assert learner.status == User.STATUS_ACTIVE

    @pytest.mark.parametrize("role", ["learner", "admin", "super-admin"])
    def test_only_instructors_create_recommendations(self, api_client, make_user, learner, cohort, role):
        response = api_client(make_user(role)).post(reverse("reviews:drop_recommendation_list"), {
            "learnerId": learner.id, "cohortId": str(cohort.id), "reason": "x",
        }, format="json")
        assert response.status_code == 403
        assert response.json() == {"error": "Insufficient permissions"}

    @pytest.mark.parametrize("role", ["learner", "instructor"])
    def test_only_admins_review(self, api_client, make_user, recommendation, role):
        response = api_client(make_user(role)).put(
            reverse("reviews:drop_recommendation_review", args=[recommendation.id]),
            {"status": "approved"}, format="json",
        )
        assert response.status_code == 403

    def test_super_admin_reviews(self, api_client, super_admin, recommendation):
        response = api_client(super_admin).put(
            reverse("reviews:drop_recommendation_review", args=[recommendation.id]),
            {"status": "rejected"}, format="json",
        )
        assert response.status_code == 200

    def test_bad_review_status_is_422(self, api_client, admin_user, recommendation):
        response = api_client(admin_user).put(
            reverse("reviews:drop_recommendation_review", args=[recommendation.id]),
            {"status": "appealed"}, format="json",
        )
        assert response.status_code == 422

    def test_unknown_appeal_is_404(self, api_client, admin_user):
        response = api_client(admin_user).put(
            reverse("reviews:appeal_review", args=[uuid.uuid4()]), {"status": "approved"}, format="json"
        )
        assert response.status_code == 404

    def test_grace_period_endpoint(self, api_client, admin_user, learner, cohort):
        response = api_client(admin_user).post(reverse("reviews:grace_period_create"), {
            "learnerId": learner.id, "cohortId": str(cohort.id), "extensionDays": 7, "reason": "Family",
        }, format="json")
        assert response.status_code == 201
        assert response.json()["extensionDays"] == 7

    def test_instructor_note(self, api_client, instructor, learner, cohort):
        response = api_client(instructor).post(reverse("reviews:note_create"), {
            "learnerId": learner.id, "cohortId": str(cohort.id), "note": "Needs mentoring", "type": "mentoring",
        }, format="json")
        assert response.status_code == 201
        assert InstructorNote.objects.get().author == instructor

    def test_super_admin_cannot_write_notes(self, api_client, super_admin, learner, cohort):
        response = api_client(super_admin).post(reverse("reviews:note_create"), {
            "learnerId": learner.id, "cohortId": str(cohort.id), "note": "x",
        }, format="json")
        assert response.status_code == 403
