from rest_framework import serializers
from apps.catalog.models import Service
from .models import JobPost, JobApplication, WorkPost


class JobApplicationSerializer(serializers.ModelSerializer):
    provider_name = serializers.CharField(source='provider.name', read_only=True)
    provider_email = serializers.EmailField(source='provider.email', read_only=True)
    provider_rating = serializers.FloatField(source='provider.provider.rating', read_only=True)

    class Meta:
        model = JobApplication
        fields = ['id', 'job_post', 'provider', 'provider_name', 'provider_email', 'provider_rating', 'status', 'applied_at']
        read_only_fields = ['job_post', 'provider', 'status', 'applied_at']

    def validate(self, data):
        job = self.context['job']
        provider = self.context['request'].user
        if not job.can_accept_applications():
            raise serializers.ValidationError("This job post is no longer accepting applications.")
        if JobApplication.objects.filter(job_post=job, provider=provider).exists():
            raise serializers.ValidationError("You have already applied to this job post.")
        return data

    def create(self, validated_data):
        return JobApplication.objects.create(
            job_post=self.context['job'],
            provider=self.context['request'].user,
        )


class JobPostSerializer(serializers.ModelSerializer):
    service = serializers.PrimaryKeyRelatedField(
        queryset=Service.objects.all(),
        error_messages={'does_not_exist': 'Service not found.'}
    )
    service_name = serializers.CharField(source='service.name', read_only=True, default=None)
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    customer_phone = serializers.CharField(source='customer.phone_number', read_only=True)
    assigned_provider_name = serializers.CharField(source='assigned_provider.name', read_only=True, default=None)
    applications = JobApplicationSerializer(many=True, read_only=True)

    class Meta:
        model = JobPost
        fields = [
            'id', 'title', 'description', 'duration', 'service', 'service_name', 'location',
            'customer', 'customer_name', 'customer_phone', 'job_status', 'assigned_provider',
            'assigned_provider_name', 'applications', 'created_at', 'updated_at'
        ]
        read_only_fields = ['customer', 'job_status', 'assigned_provider', 'created_at', 'updated_at']

    def validate(self, data):
        if self.instance is None:
            customer = self.context['request'].user
            if not customer.phone_number:
                raise serializers.ValidationError(
                    "Please add a phone number to your profile before posting a job."
                )
        return data


class JobPostUpdateSerializer(JobPostSerializer):
    job_status = serializers.ChoiceField(choices=['open', 'cancelled'], required=False)

    class Meta(JobPostSerializer.Meta):
        read_only_fields = ['customer', 'assigned_provider', 'created_at', 'updated_at']

    def validate_job_status(self, value):
        if self.instance.job_status in ('in_progress', 'completed') and value == 'open':
            raise serializers.ValidationError("A job that has been assigned cannot be reopened.")
        return value


class WorkPostSerializer(serializers.ModelSerializer):
    provider_name = serializers.CharField(source='provider.name', read_only=True)
    service_name = serializers.CharField(source='service.name', read_only=True, default=None)
    customer_name = serializers.CharField(source='customer.name', read_only=True, default=None)
    job_post = serializers.PrimaryKeyRelatedField(
        queryset=JobPost.objects.all(),
        required=False,
        allow_null=True,
        error_messages={'does_not_exist': 'Job post not found.'}
    )
    is_public = serializers.BooleanField(default=True)

    class Meta:
        model = WorkPost
        fields = [
            'id', 'title', 'description', 'before_image', 'after_image', 'category',
            'provider', 'provider_name', 'job_post', 'service', 'service_name',
            'customer', 'customer_name', 'completed_at', 'customer_feedback', 'is_public',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['provider', 'service', 'customer', 'created_at', 'updated_at']

    def validate(self, data):
        job = data.get('job_post')
        if job is not None:
            data['service'] = job.service
            data['customer'] = job.customer
            if not data.get('category') and job.service:
                data['category'] = job.service.category or job.service.name
        return data
