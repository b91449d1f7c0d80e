# apps/learn/views/events.py
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from apps.accounts.policy import require
from ..models import Event
from ..serializers import EventSerializer
from ..services.cohorts import get_cohort
from ..services.events import events_for


@api_view(["GET", "POST"])
def event_list_view(request):
    if request.method == "GET":
        return Response(EventSerializer(events_for(request.user), many=True).data)

    require(request.user, 'event.create')
    serializer = EventSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    serializer.save(created_by=request.user)
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
def cohort_events_view(request, cohort_id):
    cohort = get_cohort(cohort_id)
    return Response(EventSerializer(Event.objects.filter(cohort=cohort), many=True).data)
