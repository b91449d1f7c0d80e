# apps/learn/views/progress.py
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..serializers import LearnerProgressSerializer, TaskSerializer
from ..services import progress as progress_service


@api_view(["GET"])
def learner_progress_view(request, learner_id):
    learner, rows = progress_service.progress_for(request.user, learner_id)
    return Response({
        "learnerId": learner.id,
        "activeCohortId": learner.active_cohort_id,
        "progress": LearnerProgressSerializer(rows, many=True).data,
    })


@api_view(["GET"])
def learner_tasks_view(request, learner_id):
    learner, cohort, tasks = progress_service.tasks_for(request.user, learner_id)
    return Response({
        "learnerId": learner.id,
        "cohortId": cohort.id if cohort else None,
        "tasks": TaskSerializer(tasks, many=True).data,
    })
