import logging
from django.db import transaction
from rest_framework.views import APIView
from rest_framework import status
from rest_framework.parsers import MultiPartParser, FormParser, JSONParser
from rest_framework.permissions import IsAuthenticated
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from core.query import query_helper
from core.utils import IsCustomer, IsProvider, IsApprovedProvider, api_response, error_response
from apps.users.permissions import RoleBasedPermission
from apps.notifications.utils import notify, send_notification
from .models import JobPost, JobApplication, WorkPost
from .serializers import JobPostSerializer, JobPostUpdateSerializer, JobApplicationSerializer, WorkPostSerializer

logger = logging.getLogger(__name__)

JOB_POST_SEARCH_FIELDS = ['title', 'description', 'location', 'duration']
JOB_POST_FILTER_FIELDS = {'job_status', 'service', 'customer', 'assigned_provider', 'location'}
WORK_POST_SEARCH_FIELDS = ['title', 'description', 'category']
WORK_POST_FILTER_FIELDS = {'category', 'service', 'provider', 'job_post', 'is_public'}

list_parameters = [
    openapi.Parameter('q', openapi.IN_QUERY, type=openapi.TYPE_STRING),
    openapi.Parameter('sort', openapi.IN_QUERY, type=openapi.TYPE_STRING),
    openapi.Parameter('page', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
    openapi.Parameter('limit', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
]


def _job_post_queryset():
    return JobPost.objects.select_related('service', 'customer', 'assigned_provider').prefetch_related(
        'applications__provider__provider'
    )


def _work_post_queryset():
    return WorkPost.objects.select_related('provider', 'service', 'customer', 'job_post')


def _can_manage_job(user, job):
    return user.is_admin or job.customer_id == user.id


def _work_post_link_error(job, provider):
    if job.approved_application_for(provider) is None:
        return "You can only post work for jobs where your application was approved."
    if job.job_status != 'completed':
        return "Work can only be posted once the job is completed."
    return None


class JobPostListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsAuthenticated(), IsCustomer()]
        return [IsAuthenticated()]

    @swagger_auto_schema(
        operation_description="Customers see their own job posts; providers and admins see all of them.",
        manual_parameters=list_parameters + [
            openapi.Parameter('job_status', openapi.IN_QUERY, type=openapi.TYPE_STRING),
            openapi.Parameter('service', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
        ],
        responses={200: JobPostSerializer(many=True)}
    )
    def get(self, request):
        default_filters = {'customer': request.user} if request.user.is_customer else None
        items, pagination = query_helper(
            _job_post_queryset(),
            request.query_params,
            search_fields=JOB_POST_SEARCH_FIELDS,
            default_filters=default_filters,
            filter_fields=JOB_POST_FILTER_FIELDS,
            price_field=None,
            rating_field=None,
        )
        return api_response(JobPostSerializer(items, many=True).data, pagination=pagination)

    @swagger_auto_schema(request_body=JobPostSerializer, responses={201: JobPostSerializer, 400: 'Bad Request'})
    def post(self, request):
        serializer = JobPostSerializer(data=request.data, context={'request': request})
        if serializer.is_valid():
            job = serializer.save(customer=request.user)
            logger.info(f"Customer {request.user.id} created job post {job.id}")
            return api_response(
                JobPostSerializer(job).data,
                message="Job post created successfully",
                status_code=status.HTTP_201_CREATED
            )
        return error_response("Validation failed", errors=serializer.errors)


class JobPostDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(responses={200: JobPostSerializer, 403: 'Forbidden', 404: 'Not Found'})
    def get(self, request, id):
        try:
            job = _job_post_queryset().get(pk=id)
        except JobPost.DoesNotExist:
            return error_response("Job post not found", status_code=404)
        if request.user.is_customer and job.customer_id != request.user.id:
            return error_response("You can only view your own job posts", status_code=403)
        return api_response(JobPostSerializer(job).data)

    @swagger_auto_schema(request_body=JobPostUpdateSerializer, responses={200: JobPostSerializer})
    def put(self, request, id):
        try:
            job = _job_post_queryset().get(pk=id)
        except JobPost.DoesNotExist:
            return error_response("Job post not found", status_code=404)
        if not _can_manage_job(request.user, job):
            return error_response("You can only update your own job posts", status_code=403)
        serializer = JobPostUpdateSerializer(job, data=request.data, partial=True, context={'request': request})
        if serializer.is_valid():
            job = serializer.save()
            return api_response(JobPostSerializer(job).data, message="Job post updated successfully")
        return error_response("Validation failed", errors=serializer.errors)

    def delete(self, request, id):
        try:
            job = JobPost.objects.get(pk=id)
        except JobPost.DoesNotExist:
            return error_response("Job post not found", status_code=404)
        if not _can_manage_job(request.user, job):
            return error_response("You can only delete your own job posts", status_code=403)
        job.delete()
        logger.info(f"Job post {id} deleted by user {request.user.id}")
        return api_response(message="Job post deleted successfully")


class JobPostApplyView(APIView):
    permission_classes = [IsAuthenticated, IsApprovedProvider]

    @swagger_auto_schema(
        operation_description="Apply to an open job post.",
        request_body=None,
        responses={
            201: JobApplicationSerializer,
            400: openapi.Response('Bad Request', openapi.Schema(
                type=openapi.TYPE_OBJECT,
                properties={'message': openapi.Schema(type=openapi.TYPE_STRING)}
            )),
            404: 'Not Found'
        }
    )
    def post(self, request, id):
        try:
            job = JobPost.objects.select_related('customer').get(pk=id)
        except JobPost.DoesNotExist:
            logger.error(f"Job post {id} not found for application")
            return error_response("Job post not found", status_code=404)

        serializer = JobApplicationSerializer(data={}, context={'request': request, 'job': job})
        if not serializer.is_valid():
            logger.warning(f"Application by provider {request.user.id} to job post {id} rejected: {serializer.errors}")
            return error_response("Validation failed", errors=serializer.errors)

        application = serializer.save()
        notify(job.customer, f"{request.user.name} applied to your job post '{job.title}'.", 'info')
        send_notification(
            job.customer,
            f"New application for {job.title}",
            (
                f"Dear {job.customer.name},\n\n"
                f"{request.user.name} has applied to your job post '{job.title}'.\n"
                f"Please review the application on WorkBond.\n\n"
                f"Best regards,\nWorkBond Team"
            ),
            f"New application for '{job.title}' from {request.user.name}. Review it on WorkBond."
        )
        logger.info(f"Provider {request.user.id} applied to job post {id}")
        return api_response(
            JobApplicationSerializer(application).data,
            message="Application submitted successfully",
            status_code=status.HTTP_201_CREATED
        )


class JobApplicationResponseView(APIView):
    """Approve or reject an application; ``decision`` comes from the URL."""
    permission_classes = [IsAuthenticated, IsCustomer]
    decision = None

    @swagger_auto_schema(request_body=None, responses={200: JobPostSerializer, 400: 'Bad Request', 404: 'Not Found'})
    def put(self, request, id, application_id):
        try:
            job = JobPost.objects.get(pk=id, customer=request.user)
            application = JobApplication.objects.select_related('provider').get(pk=application_id, job_post=job)
        except (JobPost.DoesNotExist, JobApplication.DoesNotExist):
            return error_response("Job post or application not found", status_code=404)

        if application.status == self.decision:
            return error_response(f"Application has already been {self.decision}")

        if self.decision == 'approved':
            if job.job_status != 'open':
                return error_response("Only open job posts can accept an application")
            with transaction.atomic():
                application.status = 'approved'
                application.save()
                job.job_status = 'in_progress'
                job.assigned_provider = application.provider
                job.save()
            notify(application.provider, f"Your application for '{job.title}' was approved.", 'success')
            send_notification(
                application.provider,
                f"Application approved for {job.title}",
                (
                    f"Dear {application.provider.name},\n\n"
                    f"Your application for job '{job.title}' has been approved.\n"
                    f"Contact the customer at:\n"
                    f"- Email: {request.user.email}\n"
                    f"- Phone: {request.user.phone_number or 'Not provided'}\n\n"
                    f"Best regards,\nWorkBond Team"
                ),
                f"Your application for '{job.title}' was approved. Contact the customer for details."
            )
        else:
            with transaction.atomic():
                application.status = 'rejected'
                application.save()
                if job.job_status == 'in_progress' and job.assigned_provider_id == application.provider_id:
                    job.assigned_provider = None
                    job.job_status = 'open'
                    job.save()
            notify(application.provider, f"Your application for '{job.title}' was rejected.", 'warning')

        logger.info(f"Application {application.id} on job post {job.id} {self.decision} by customer {request.user.id}")
        job = _job_post_queryset().get(pk=job.pk)
        return api_response(JobPostSerializer(job).data, message=f"Application {self.decision} successfully")


class JobPostCompleteView(APIView):
    permission_classes = [IsAuthenticated, IsProvider]

    @swagger_auto_schema(request_body=None, responses={200: JobPostSerializer, 403: 'Forbidden', 404: 'Not Found'})
    def put(self, request, id):
        try:
            job = JobPost.objects.select_related('customer').get(pk=id)
        except JobPost.DoesNotExist:
            return error_response("Job post not found", status_code=404)
        if job.approved_application_for(request.user) is None:
            return error_response("Only the approved provider can complete this job", status_code=403)
        if not job.can_be_completed_by(request.user):
            return error_response(f"Job post is {job.get_job_status_display().lower()} and cannot be completed")

        job.mark_as_completed()
        notify(job.customer, f"{request.user.name} marked '{job.title}' as completed.", 'success')
        logger.info(f"Job post {job.id} completed by provider {request.user.id}")
        return api_response(JobPostSerializer(_job_post_queryset().get(pk=job.pk)).data, message="Job marked as completed")


class WorkPostListCreateView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsAuthenticated(), IsApprovedProvider()]
        return [IsAuthenticated()]

    @swagger_auto_schema(
        operation_description="Providers see their own work posts; everyone else sees public ones.",
        manual_parameters=list_parameters + [
            openapi.Parameter('category', openapi.IN_QUERY, type=openapi.TYPE_STRING),
        ],
        responses={200: WorkPostSerializer(many=True)}
    )
    def get(self, request):
        if request.user.is_provider:
            default_filters = {'provider': request.user}
        else:
            default_filters = {'is_public': True}
        items, pagination = query_helper(
            _work_post_queryset(),
            request.query_params,
            search_fields=WORK_POST_SEARCH_FIELDS,
            default_filters=default_filters,
            filter_fields=WORK_POST_FILTER_FIELDS,
            price_field=None,
            rating_field=None,
        )
        return api_response(
            WorkPostSerializer(items, many=True, context={'request': request}).data,
            pagination=pagination
        )

    @swagger_auto_schema(request_body=WorkPostSerializer, responses={201: WorkPostSerializer, 403: 'Forbidden'})
    def post(self, request):
        serializer = WorkPostSerializer(data=request.data, context={'request': request})
        if not serializer.is_valid():
            return error_response("Validation failed", errors=serializer.errors)

        job = serializer.validated_data.get('job_post')
        if job is not None:
            link_error = _work_post_link_error(job, request.user)
            if link_error:
                return error_response(link_error, status_code=403)

        work_post = serializer.save(provider=request.user)
        if work_post.customer:
            notify(work_post.customer, f"{request.user.name} shared the finished work for '{job.title}'.", 'info')
        logger.info(f"Provider {request.user.id} created work post {work_post.id}")
        return api_response(
            WorkPostSerializer(work_post, context={'request': request}).data,
            message="Work post created successfully",
            status_code=status.HTTP_201_CREATED
        )


class WorkPostDetailView(APIView):
    required_roles = ['provider', 'admin']
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def get_permissions(self):
        if self.request.method == 'GET':
            return [IsAuthenticated()]
        return [IsAuthenticated(), RoleBasedPermission()]

    @swagger_auto_schema(responses={200: WorkPostSerializer, 403: 'Forbidden', 404: 'Not Found'})
    def get(self, request, id):
        try:
            work_post = _work_post_queryset().get(pk=id)
        except WorkPost.DoesNotExist:
            return error_response("Work post not found", status_code=404)
        if not work_post.is_visible_to(request.user):
            return error_response("This work post is private", status_code=403)
        return api_response(WorkPostSerializer(work_post, context={'request': request}).data)

    @swagger_auto_schema(request_body=WorkPostSerializer, responses={200: WorkPostSerializer})
    def put(self, request, id):
        try:
            work_post = _work_post_queryset().get(pk=id)
        except WorkPost.DoesNotExist:
            return error_response("Work post not found", status_code=404)
        if work_post.provider_id != request.user.id and not request.user.is_admin:
            return error_response("You can only update your own work posts", status_code=403)

        serializer = WorkPostSerializer(work_post, data=request.data, partial=True, context={'request': request})
        if not serializer.is_valid():
            return error_response("Validation failed", errors=serializer.errors)
        job = serializer.validated_data.get('job_post')
        if job is not None and job.id != work_post.job_post_id:
            link_error = _work_post_link_error(job, work_post.provider)
            if link_error:
                return error_response(link_error, status_code=403)
        work_post = serializer.save()
        return api_response(
            WorkPostSerializer(work_post, context={'request': request}).data,
            message="Work post updated successfully"
        )

    def delete(self, request, id):
        try:
            work_post = WorkPost.objects.get(pk=id)
        except WorkPost.DoesNotExist:
            return error_response("Work post not found", status_code=404)
        if work_post.provider_id != request.user.id and not request.user.is_admin:
            return error_response("You can only delete your own work posts", status_code=403)
        work_post.before_image.delete(save=False)
        work_post.after_image.delete(save=False)
        work_post.delete()
        return api_response(message="Work post deleted successfully")


class WorkPostsByProviderView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(manual_parameters=list_parameters, responses={200: WorkPostSerializer(many=True)})
    def get(self, request, provider_id):
        items, pagination = query_helper(
            _work_post_queryset(),
            request.query_params,
            search_fields=WORK_POST_SEARCH_FIELDS,
            default_filters={'provider_id': provider_id, 'is_public': True},
            filter_fields=WORK_POST_FILTER_FIELDS,
            price_field=None,
            rating_field=None,
        )
        return api_response(
            WorkPostSerializer(items, many=True, context={'request': request}).data,
            pagination=pagination
        )


class WorkPostsByJobPostView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(responses={200: WorkPostSerializer(many=True), 404: 'Not Found'})
    def get(self, request, job_post_id):
        if not JobPost.objects.filter(pk=job_post_id).exists():
            return error_response("Job post not found", status_code=404)
        work_posts = _work_post_queryset().filter(job_post_id=job_post_id, is_public=True)
        return api_response(WorkPostSerializer(work_posts, many=True, context={'request': request}).data)
