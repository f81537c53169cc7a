import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import ClientError
from typing import Optional

from screencast.core.config import Settings, settings as default_settings

# Codes renvoyés par HeadObject / GetObject pour un objet absent
NOT_FOUND_CODES = {"404", "NotFound", "NoSuchKey"}

def make_s3_client(endpoint_url: Optional[str], cfg: Settings = default_settings):
    boto_cfg = BotoConfig(
        signature_version="s3v4",
        s3={"addressing_style": "path" if endpoint_url else "auto"},
    )
    return boto3.client(
        "s3",
        endpoint_url=endpoint_url,
        region_name=cfg.S3_REGION,
        aws_access_key_id=cfg.S3_KEY,
        aws_secret_access_key=cfg.S3_SECRET,
        config=boto_cfg,
        use_ssl=endpoint_url.startswith("https") if endpoint_url else True,
    )

def make_s3_internal(cfg: Settings = default_settings):
    return make_s3_client(cfg.S3_ENDPOINT, cfg)

def make_s3_public(cfg: Settings = default_settings):
    return make_s3_client(cfg.S3_PUBLIC_ENDPOINT or cfg.S3_ENDPOINT, cfg)

def presign_get_url(s3, *, bucket: str, key: str, content_type: str, ttl: int) -> str:
    return s3.generate_presigned_url(
        ClientMethod="get_object",
        Params={"Bucket": bucket, "Key": key, "ResponseContentType": content_type},
        ExpiresIn=ttl,
    )

def is_not_found(error: ClientError) -> bool:
    err = error.response.get("Error", {})
    if str(err.get("Code")) in NOT_FOUND_CODES:
        return True
    return error.response.get("ResponseMetadata", {}).get("HTTPStatusCode") == 404
