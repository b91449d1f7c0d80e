from rest_framework.decorators import api_view
from rest_framework.response import Response

from apps.accounts.decorators import action_required
from .serializers import AuditLogSerializer
from .services import recent_entries


@api_view(["GET"])
@action_required('audit_log.view')
def audit_log_list(request):
    return Response(AuditLogSerializer(recent_entries(), many=True).data)
