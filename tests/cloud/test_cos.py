"""Unit tests for COS bucket listing."""

import httpx
import pytest

from pvsadm.cloud.api import CloudAPIError
from pvsadm.cloud.cos import list_buckets, parse_bucket_names

LIST_BUCKETS_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<ListAllMyBucketsResult xmlns="http://s3.amazonaws.com/doc/2006-03-01/">
  <Owner>
    <ID>0b9c4e5a-3f0e-4a70-8b2f-0c3f5b7a1d22</ID>
    <DisplayName>0b9c4e5a-3f0e-4a70-8b2f-0c3f5b7a1d22</DisplayName>
  </Owner>
  <Buckets>
    <Bucket>
      <Name>power-images</Name>
      <CreationDate>2021-03-02T10:11:12.000Z</CreationDate>
    </Bucket>
    <Bucket>
      <Name>rhcos-builds</Name>
      <CreationDate>2022-07-19T08:00:00.000Z</CreationDate>
    </Bucket>
  </Buckets>
</ListAllMyBucketsResult>
"""


def test_parse_bucket_names():
    assert parse_bucket_names(LIST_BUCKETS_XML) == ["power-images", "rhcos-builds"]


def test_parse_bucket_names_ignores_owner_display_name():
    xml = "<ListAllMyBucketsResult><Owner><DisplayName>x</DisplayName></Owner><Buckets/></ListAllMyBucketsResult>"
    assert parse_bucket_names(xml) == []


async def test_list_buckets_request(make_session):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, text=LIST_BUCKETS_XML, headers={"Content-Type": "application/xml"})

    session = make_session(handler)
    buckets = await list_buckets(session, "0b9c4e5a", "us-south")

    assert buckets == ["power-images", "rhcos-builds"]
    request = seen[0]
    assert str(request.url) == "https://s3.us-south.cloud-object-storage.appdomain.cloud/"
    assert request.headers["ibm-service-instance-id"] == "0b9c4e5a"
    assert request.headers["Authorization"] == "Bearer test-token"
    assert request.headers["Accept"] == "application/xml"


async def test_list_buckets_access_denied(make_session):
    xml_error = "<Error><Code>AccessDenied</Code><Message>Access Denied</Message></Error>"
    session = make_session(lambda request: httpx.Response(403, text=xml_error))

    with pytest.raises(CloudAPIError) as excinfo:
        await list_buckets(session, "0b9c4e5a", "us-south")
    assert excinfo.value.status_code == 403


async def test_list_buckets_malformed_body(make_session):
    session = make_session(lambda request: httpx.Response(200, text="<ListAllMyBucketsResult"))

    with pytest.raises(CloudAPIError, match="malformed bucket listing"):
        await list_buckets(session, "0b9c4e5a", "us-south")
