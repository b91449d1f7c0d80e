# apps/learn/views/courses.py
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from apps.accounts.decorators import action_required
from apps.accounts.policy import require
from ..serializers import (
    CourseSerializer, CourseDetailSerializer, CourseCreateSerializer, LessonCreateSerializer,
    LessonSerializer, ModuleCreateSerializer, ModuleSerializer,
)
from ..services import catalog


@api_view(["GET", "POST"])
def course_list_view(request):
    if request.method == "GET":
        return Response(CourseSerializer(catalog.visible_courses(request.user), many=True).data)

    require(request.user, 'course.create')
    serializer = CourseCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    course = catalog.create_course(
        request.user, name=data['name'], description=data['description'], duration_hours=data['duration']
    )
    return Response(CourseSerializer(course).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
def course_detail_view(request, course_id):
    course = catalog.course_tree(course_id)
    return Response(CourseDetailSerializer(course, context={'request': request}).data)


@api_view(["POST"])
@action_required('module.create')
def module_create_view(request):
    serializer = ModuleCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    module = catalog.add_module(
        data['courseId'], name=data['name'], description=data['description'], duration_hours=data['duration']
    )
    return Response(ModuleSerializer(module).data, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@action_required('lesson.create')
def lesson_create_view(request):
    serializer = LessonCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    lesson = catalog.add_lesson(
        data['moduleId'],
        assignment=data.get('assignment'),
        name=data['name'],
        content=data['content'],
        video_url=data['videoUrl'],
        duration_minutes=data['duration'],
    )
    return Response(LessonSerializer(lesson, context={'request': request}).data, status=status.HTTP_201_CREATED)
