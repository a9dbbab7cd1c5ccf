# core/constants.py
ROLE_CHOICES = (
    ('customer', 'Customer'),
    ('provider', 'Provider'),
    ('admin', 'Admin'),
)

AVAILABILITY_CHOICES = (
    ('Available', 'Available'),
    ('Unavailable', 'Unavailable'),
)

BOOKING_STATUS_CHOICES = (
    ('Pending', 'Pending'),        # Customer booked, provider has not answered
    ('Confirmed', 'Confirmed'),    # Provider accepted the booking
    ('Completed', 'Completed'),
    ('Cancelled', 'Cancelled'),
)

REVIEW_AUTHOR_CHOICES = (
    ('customer', 'Customer'),      # Customer reviewing the provider
    ('provider', 'Provider'),      # Provider reviewing the customer
)

JOB_STATUS_CHOICES = (
    ('open', 'Open'),              # Job is available for applications
    ('in_progress', 'In Progress'),  # An application was approved
    ('completed', 'Completed'),    # Assigned provider finished the work
    ('cancelled', 'Cancelled'),
)

JOB_APPLICATION_STATUS_CHOICES = (
    ('applied', 'Applied'),
    ('approved', 'Approved'),
    ('rejected', 'Rejected'),
)

PRICE_TYPE_CHOICES = (
    ('fixed', 'Fixed'),
    ('per_unit', 'Per Unit'),
    ('range', 'Range'),
)

PRICE_UNIT_CHOICES = (
    ('hour', 'Hour'),
    ('day', 'Day'),
    ('project', 'Project'),
    ('item', 'Item'),
    ('square_feet', 'Square Feet'),
    ('square_meter', 'Square Meter'),
)

SUBSCRIPTION_USER_TYPE_CHOICES = (
    ('Provider', 'Provider'),
    ('Customer', 'Customer'),
)

SUBSCRIPTION_PLAN_CHOICES = (
    ('Free', 'Free'),
    ('Standard', 'Standard'),
    ('Premium', 'Premium'),
    ('Business', 'Business'),
    ('Individual', 'Individual'),
)

SUBSCRIPTION_STATUS_CHOICES = (
    ('Active', 'Active'),
    ('Expired', 'Expired'),
    ('Cancelled', 'Cancelled'),
)

PAYMENT_STATUS_CHOICES = (
    ('pending', 'Pending'),
    ('paid', 'Paid'),
    ('failed', 'Failed'),
    ('refunded', 'Refunded'),
)

NOTIFICATION_TYPE_CHOICES = (
    ('info', 'Info'),
    ('success', 'Success'),
    ('warning', 'Warning'),
    ('error', 'Error'),
)

# Query helper bounds
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
MAX_PAGE_NUMBER = 1000000
NOTIFICATION_LIST_LIMIT = 50
