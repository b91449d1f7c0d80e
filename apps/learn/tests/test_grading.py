import logging
import uuid
from decimal import Decimal

import pytest

from apps.audit.models import AuditLog
from apps.core.exceptions import Conflict, NotFound, ValidationFailed
from apps.learn.models import Course, LearnerProgress, Lesson, Module, ModuleProgress, Submission
from apps.learn.services import enrollment, grading


@pytest.fixture
def enrolled(learner, instructor, cohort, course):
    """Learner approved into `course` within `cohort`; returns the course-level progress row."""
    request = enrollment.apply_to_course(learner, cohort.id, course.id)
    _, progress = enrollment.handle_application(request.id, "approve", instructor)
    return progress


def submit_and_grade(learner, cohort, lesson, grade, grader):
    submission = grading.submit_assignment(learner, lesson.id, cohort.id, content="https://example.test/work")
    return grading.grade_submission(submission.id, grade, "", grader)


class TestScale:

    @pytest.mark.parametrize("grade,percent", [
        (0, "0.00"), (5, "50.00"), (6, "60.00"), (7.5, "75.00"), (10, "100.00"),
    ])
    def test_to_percent(self, grade, percent):
        assert grading.to_percent(Decimal(str(grade))) == Decimal(percent)

    def test_mean_of_nothing(self):
        assert grading.mean([]) is None

    @pytest.mark.parametrize("status,score,expected", [
        ("on-track", "49.99", "under-review"),
        ("on-track", "50.00", "on-track"),
        ("at-risk", "10.00", "under-review"),
        ("at-risk", "80.00", "at-risk"),
        ("under-review", "50.00", "on-track"),
        ("under-review", "20.00", "under-review"),
        ("dropped", "10.00", "dropped"),
        ("failed", "90.00", "failed"),
    ])
    def test_next_status(self, status, score, expected):
        assert grading.next_status(status, Decimal(score)) == expected


@pytest.mark.django_db
class TestGradeSubmission:

    def test_example_scenario(self, learner, instructor, cohort, course, lessons, enrolled):
        assert enrolled.current_score == Decimal("100")
        assert cohort.learners.filter(id=learner.id).exists()
        assert course.registrars.filter(id=learner.id).exists()

        submit_and_grade(learner, cohort, lessons["SQL basics"], 6, instructor)
        submit_and_grade(learner, cohort, lessons["Joins"], 8, instructor)

        enrolled.refresh_from_db()
        module_progress = ModuleProgress.objects.get(progress=enrolled)
        # 6/10 and 8/10 are 60% and 80%
        assert module_progress.scores == [60.0, 80.0]
        assert module_progress.average_score == Decimal("70.00")
        assert module_progress.is_graduated is True
        assert enrolled.current_score == Decimal("70.00")
        assert enrolled.status == LearnerProgress.ON_TRACK

    def test_grade_fields_are_stored_on_0_to_10(self, learner, instructor, cohort, lessons, enrolled):
        submission = submit_and_grade(learner, cohort, lessons["SQL basics"], Decimal("7.5"), instructor)

        submission.refresh_from_db()
        assert submission.grade == Decimal("7.50")
        assert submission.status == Submission.GRADED
        assert submission.graded_by == instructor
        assert submission.graded_at is not None

        enrolled.refresh_from_db()
        assert enrolled.last_assessment_score == Decimal("75.00")
        assert enrolled.last_assessment_date is not None

    def test_current_score_is_mean_of_all_graded(self, learner, instructor, cohort, lessons, enrolled):
        submit_and_grade(learner, cohort, lessons["SQL basics"], 9, instructor)
        submit_and_grade(learner, cohort, lessons["Joins"], 6, instructor)
        # pending submissions do not count
        grading.submit_assignment(learner, lessons["Reading"].id, cohort.id, content="notes")

        enrolled.refresh_from_db()
        assert enrolled.current_score == Decimal("75.00")

    def test_regrading_same_value_is_idempotent(self, learner, instructor, cohort, lessons, enrolled):
        submission = submit_and_grade(learner, cohort, lessons["SQL basics"], 8, instructor)
        submit_and_grade(learner, cohort, lessons["Joins"], 4, instructor)
        enrolled.refresh_from_db()
        before = (enrolled.current_score, enrolled.status)

        grading.grade_submission(submission.id, 8, "again", instructor)
        grading.grade_submission(submission.id, 8, "and again", instructor)

        enrolled.refresh_from_db()
        assert (enrolled.current_score, enrolled.status) == before
        assert ModuleProgress.objects.filter(progress=enrolled).count() == 1
        assert ModuleProgress.objects.get(progress=enrolled).scores == [80.0, 40.0]

    def test_regrade_recomputes_from_scratch(self, learner, instructor, cohort, lessons, enrolled):
        submission = submit_and_grade(learner, cohort, lessons["SQL basics"], 2, instructor)
        grading.grade_submission(submission.id, 9, "", instructor)

        enrolled.refresh_from_db()
        assert enrolled.current_score == Decimal("90.00")

    def test_graduation_follows_module_average(self, learner, instructor, cohort, lessons, enrolled):
        first = submit_and_grade(learner, cohort, lessons["SQL basics"], 6, instructor)
        entry = ModuleProgress.objects.get(progress=enrolled)
        assert entry.is_graduated is False

        submit_and_grade(learner, cohort, lessons["Joins"], 8, instructor)
        entry.refresh_from_db()
        assert entry.is_graduated is True

        grading.grade_submission(first.id, 4, "", instructor)
        entry.refresh_from_db()
        assert entry.average_score == Decimal("60.00")
        assert entry.is_graduated is False

    def test_module_progress_is_per_module(self, learner, instructor, cohort, lessons, enrolled):
        submit_and_grade(learner, cohort, lessons["SQL basics"], 10, instructor)
        assert ModuleProgress.objects.filter(progress=enrolled).count() == 1
        assert ModuleProgress.objects.get(progress=enrolled).module.name == "Foundations"

    def test_low_score_puts_learner_under_review_and_back(self, learner, instructor, cohort, lessons, enrolled):
        submit_and_grade(learner, cohort, lessons["SQL basics"], 3, instructor)
        enrolled.refresh_from_db()
        assert enrolled.current_score == Decimal("30.00")
        assert enrolled.status == LearnerProgress.UNDER_REVIEW

        submit_and_grade(learner, cohort, lessons["Joins"], 10, instructor)
        enrolled.refresh_from_db()
        assert enrolled.current_score == Decimal("65.00")
        assert enrolled.status == LearnerProgress.ON_TRACK

        transitions = AuditLog.objects.filter(action="progress.status_changed").order_by("timestamp", "id")
        assert [(e.details["from"], e.details["to"]) for e in transitions] == [
            ("on-track", "under-review"), ("under-review", "on-track"),
        ]

    def test_passing_grade_boundary_is_on_percent_scale(self, learner, instructor, cohort, lessons, enrolled):
        submit_and_grade(learner, cohort, lessons["SQL basics"], 5, instructor)
        enrolled.refresh_from_db()
        assert enrolled.current_score == Decimal("50.00")
        assert enrolled.status == LearnerProgress.ON_TRACK

    def test_at_risk_row_goes_under_review(self, learner, instructor, cohort, lessons, enrolled):
        enrolled.status = LearnerProgress.AT_RISK
        enrolled.save()

        submit_and_grade(learner, cohort, lessons["SQL basics"], 1, instructor)
        enrolled.refresh_from_db()
        assert enrolled.status == LearnerProgress.UNDER_REVIEW

    def test_high_score_leaves_at_risk_alone(self, learner, instructor, cohort, lessons, enrolled):
        enrolled.status = LearnerProgress.AT_RISK
        enrolled.save()

        submit_and_grade(learner, cohort, lessons["SQL basics"], 9, instructor)
        enrolled.refresh_from_db()
        assert enrolled.status == LearnerProgress.AT_RISK

    @pytest.mark.parametrize("grade", [-1, Decimal("10.01"), 11, "ten"])
    def test_grade_out_of_range(self, learner, instructor, cohort, lessons, enrolled, grade):
        submission = grading.submit_assignment(learner, lessons["SQL basics"].id, cohort.id, content="x")
        with pytest.raises(ValidationFailed):
            grading.grade_submission(submission.id, grade, "", instructor)
        submission.refresh_from_db()
        assert submission.status == Submission.PENDING

    def test_assignment_max_score_does_not_change_the_grade_scale(self, learner, instructor, cohort, lessons,
                                                                  enrolled):
        lesson = lessons["SQL basics"]
        lesson.assignment.max_score = 5
        lesson.assignment.save()

        submit_and_grade(learner, cohort, lesson, 8, instructor)

        enrolled.refresh_from_db()
        assert enrolled.current_score == Decimal("80.00")

    def test_unknown_submission(self, instructor):
        with pytest.raises(NotFound):
            grading.grade_submission(uuid.uuid4(), 5, "", instructor)

    def test_passing_learners_follow_latest_grade(self, learner, instructor, cohort, lessons, enrolled):
        lesson = lessons["SQL basics"]
        submission = submit_and_grade(learner, cohort, lesson, 5, instructor)
        assert lesson.assignment.passing_learners.filter(id=learner.id).exists()

        grading.grade_submission(submission.id, Decimal("4.5"), "", instructor)
        assert not lesson.assignment.passing_learners.filter(id=learner.id).exists()


@pytest.mark.django_db
class TestTargetProgress:

    def test_course_row_wins_over_cohort_row(self, learner, instructor, cohort, course, lessons):
        cohort_row = enrollment.join_cohort(learner, cohort.id)
        course_row = LearnerProgress.objects.create(learner=learner, cohort=cohort, course=course)

        submit_and_grade(learner, cohort, lessons["SQL basics"], 2, instructor)

        cohort_row.refresh_from_db()
        course_row.refresh_from_db()
        assert course_row.current_score == Decimal("20.00")
        assert course_row.status == LearnerProgress.UNDER_REVIEW
        assert cohort_row.current_score == Decimal("100")
        assert cohort_row.status == LearnerProgress.ON_TRACK

    def test_cohort_row_used_when_no_course_row(self, learner, instructor, cohort, lessons):
        cohort_row = enrollment.join_cohort(learner, cohort.id)
        submit_and_grade(learner, cohort, lessons["Joins"], 7, instructor)

        cohort_row.refresh_from_db()
        assert cohort_row.current_score == Decimal("70.00")

    def test_dropped_row_is_not_revived(self, learner, instructor, cohort, lessons):
        row = LearnerProgress.objects.create(learner=learner, cohort=cohort, status=LearnerProgress.DROPPED)
        submission = Submission.objects.create(learner=learner, cohort=cohort, lesson=lessons["SQL basics"])

        grading.grade_submission(submission.id, 1, "", instructor)

        row.refresh_from_db()
        assert row.status == LearnerProgress.DROPPED
        assert row.current_score == Decimal("10.00")

    def test_live_row_of_another_course_beats_newer_dropped_row(self, learner, instructor, cohort, lessons):
        elective = Course.objects.create(name="Elective", instructor=instructor)
        live = LearnerProgress.objects.create(learner=learner, cohort=cohort, course=elective)
        dropped = LearnerProgress.objects.create(learner=learner, cohort=cohort, status=LearnerProgress.DROPPED)
        submission = Submission.objects.create(learner=learner, cohort=cohort, lesson=lessons["SQL basics"])

        grading.grade_submission(submission.id, 9, "", instructor)

        live.refresh_from_db()
        dropped.refresh_from_db()
        assert live.current_score == Decimal("90.00")
        assert dropped.current_score == Decimal("0.00")

    def test_missing_progress_is_logged_and_grade_kept(self, learner, instructor, cohort, lessons, caplog):
        submission = Submission.objects.create(learner=learner, cohort=cohort, lesson=lessons["SQL basics"])

        with caplog.at_level(logging.WARNING, logger="apps.learn.services.grading"):
            grading.grade_submission(submission.id, 6, "", instructor)

        submission.refresh_from_db()
        assert submission.grade == Decimal("6.00")
        assert "No progress row" in caplog.text


@pytest.mark.django_db
class TestSubmitAssignment:

    def test_requires_active_enrollment(self, learner, cohort, lessons):
        with pytest.raises(Conflict):
            grading.submit_assignment(learner, lessons["SQL basics"].id, cohort.id, content="x")

    def test_lesson_outside_cohort(self, learner, instructor, cohort, enrolled):
        stray_course = Course.objects.create(name="Stray", instructor=instructor)
        stray_module = Module.objects.create(course=stray_course, name="M")
        stray = Lesson.objects.create(module=stray_module, name="L")

        with pytest.raises(NotFound):
            grading.submit_assignment(learner, stray.id, cohort.id, content="x")

    def test_resubmission_overwrites_and_withdraws_grade(self, learner, instructor, cohort, lessons, enrolled):
        submit_and_grade(learner, cohort, lessons["SQL basics"], 2, instructor)
        submit_and_grade(learner, cohort, lessons["Joins"], 8, instructor)
        enrolled.refresh_from_db()
        assert enrolled.current_score == Decimal("50.00")

        again = grading.submit_assignment(learner, lessons["SQL basics"].id, cohort.id, content="v2")

        assert Submission.objects.filter(learner=learner, lesson=lessons["SQL basics"]).count() == 1
        assert again.content == "v2"
        assert again.status == Submission.PENDING
        assert again.grade is None
        enrolled.refresh_from_db()
        assert enrolled.current_score == Decimal("80.00")
        assert ModuleProgress.objects.get(progress=enrolled).scores == [80.0]

    def test_withdrawing_the_only_grade_restores_initial_score(self, learner, instructor, cohort, lessons,
                                                              enrolled):
        submit_and_grade(learner, cohort, lessons["SQL basics"], 1, instructor)
        grading.submit_assignment(learner, lessons["SQL basics"].id, cohort.id, content="v2")

        enrolled.refresh_from_db()
        assert enrolled.current_score == Decimal("100")
        assert enrolled.status == LearnerProgress.ON_TRACK
        entry = ModuleProgress.objects.get(progress=enrolled)
        assert entry.scores == []
        assert entry.is_graduated is False

    def test_quiz_is_graded_on_submit(self, learner, cohort, lessons, enrolled):
        quiz_lesson = lessons["Pipeline quiz"]

        submission = grading.submit_assignment(learner, quiz_lesson.id, cohort.id, answers=[0, 0])

        assert submission.status == Submission.GRADED
        assert submission.grade == Decimal("5.00")
        assert submission.graded_by is None
        enrolled.refresh_from_db()
        assert enrolled.current_score == Decimal("50.00")
        assert quiz_lesson.assignment.passing_learners.filter(id=learner.id).exists()

    def test_quiz_with_missing_answers(self, learner, cohort, lessons, enrolled):
        submission = grading.submit_assignment(learner, lessons["Pipeline quiz"].id, cohort.id, answers=[])
        assert submission.grade == Decimal("0.00")

    def test_submission_touches_activity(self, learner, cohort, lessons, enrolled):
        enrolled.inactivity_days = 4
        enrolled.save()
        before = enrolled.last_activity_date

        grading.submit_assignment(learner, lessons["Reading"].id, cohort.id, content="x")

        enrolled.refresh_from_db()
        assert enrolled.inactivity_days == 0
        assert enrolled.last_activity_date >= before
