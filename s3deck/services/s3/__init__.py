# S3 Service Module
from .s3_client import S3ClientFactory, s3_client_factory
from .s3_helper import S3Helper, s3_helper
from .s3_operations import S3Operations, s3_operations

__all__ = ['S3ClientFactory', 's3_client_factory', 'S3Helper', 's3_helper', 'S3Operations', 's3_operations']
