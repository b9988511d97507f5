from .bucket import Bucket, BucketCategory, ContributionMode, BUCKET_PRESETS, DEFAULT_BUCKET, create_bucket, new_bucket_id
from .configuration import Configuration, SUPPORTED_CURRENCIES, default_configuration, validate_configuration
