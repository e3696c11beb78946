"""
Tests for HTTP response content classification.
"""

import pytest

from device_discovery.core.content_analyzer import (
    analyze_response,
    content_extension,
    extract_title,
    parse_json_keys,
)


def analyze(body, content_type=None, status_code=200, **kwargs):
    return analyze_response(
        url="http://10.0.0.5:8080/api",
        status_code=status_code,
        content_type=content_type,
        server=None,
        body=body,
        **kwargs
    )


class TestJsonDetection:

    def test_openapi_document(self):
        result = analyze('{"openapi": "3.0.0", "info": {}}', content_type="application/json")

        assert result.is_json is True
        assert result.is_openapi is True
        assert result.json_keys == ("openapi", "info")

    def test_swagger_document_without_content_type(self):
        result = analyze('  {"swagger": "2.0", "paths": {}}')
        assert result.is_json is True
        assert result.is_openapi is True

    def test_vendor_json_content_type(self):
        result = analyze('{"data": []}', content_type="application/vnd.api+json; charset=utf-8")
        assert result.is_json is True
        assert result.is_openapi is False

    def test_array_uses_first_element_keys(self):
        result = analyze('[{"id": 1, "name": "lamp"}, {"id": 2}]')
        assert result.json_keys == ("id", "name")

    def test_keys_capped_at_ten(self):
        body = "{" + ", ".join(f'"k{i}": {i}' for i in range(15)) + "}"
        assert analyze(body).json_keys == tuple(f"k{i}" for i in range(10))

    def test_unparseable_json_like_body(self):
        result = analyze("[not really json", content_type="text/plain")
        assert result.is_json is True
        assert result.json_keys == ()
        assert result.is_openapi is False

    def test_plain_text_is_not_json(self):
        assert analyze("OK", content_type="text/plain").is_json is False

    def test_parse_json_keys_scalar(self):
        document, keys = parse_json_keys("42")
        assert document == 42
        assert keys == ()

    def test_results_are_hashable(self):
        first = analyze('{"id": 1}', content_type="application/json")
        second = analyze('{"id": 1}', content_type="application/json")
        assert len({first, second}) == 1


class TestSwaggerUI:

    def test_swagger_ui_container_id(self):
        body = '<html><body><div id="swagger-ui"></div></body></html>'
        assert analyze(body, content_type="text/html").is_swagger_ui is True

    def test_swagger_ui_text(self):
        body = "<html><head><title>Swagger UI</title></head></html>"
        result = analyze(body, content_type="text/html")
        assert result.is_swagger_ui is True
        assert result.title == "Swagger UI"


class TestSoapDetection:

    def test_onvif_envelope(self, onvif_result):
        assert onvif_result.is_onvif is True
        assert onvif_result.is_soap_fault is False
        assert onvif_result.is_ignorable_soap_fault is False

    def test_ignorable_fault(self, ignorable_fault_result):
        assert ignorable_fault_result.is_soap_fault is True
        assert ignorable_fault_result.is_ignorable_soap_fault is True

    def test_regular_fault(self):
        body = (
            "<s:Envelope xmlns:s='http://www.w3.org/2003/05/soap-envelope'>"
            "<s:Body><s:Fault><s:Reason>Sender not authorized</s:Reason></s:Fault></s:Body>"
            "</s:Envelope>"
        )
        result = analyze(body, content_type="application/soap+xml", status_code=400)
        assert result.is_soap_fault is True
        assert result.is_ignorable_soap_fault is False

    def test_fault_text_outside_soap_ignored(self):
        body = "<html><body>Fault: End of file or no input: message transfer interrupted onvif</body></html>"
        result = analyze(body, content_type="text/html")
        assert result.is_soap_fault is False
        assert result.is_ignorable_soap_fault is False
        assert result.is_onvif is False


class TestResultFields:

    def test_any_status_classified(self):
        result = analyze("<html><title>Not Found</title></html>", content_type="text/html", status_code=404)
        assert result.status_code == 404
        assert result.title == "Not Found"

    def test_snippet_truncated(self):
        result = analyze("x" * 2000, snippet_length=100)
        assert result.snippet == "x" * 100
        assert len(result.raw_body) == 2000

    def test_empty_body(self):
        result = analyze("", content_type="text/html")
        assert result.raw_body is None
        assert result.snippet == ""
        assert result.title is None

    def test_title_whitespace_collapsed(self):
        assert extract_title("<TITLE>\n  My   Router \n</TITLE>") == "My Router"


class TestContentExtension:

    @pytest.mark.parametrize("body,content_type,extension", [
        ('{"a": 1}', "application/json", ".json"),
        ("<?xml version='1.0'?><root/>", "text/xml", ".xml"),
        ("<!DOCTYPE html><html></html>", "text/html", ".html"),
        ("plain text", "text/plain", ".txt"),
    ])
    def test_extension_by_content(self, body, content_type, extension):
        assert content_extension(analyze(body, content_type=content_type)) == extension

    def test_soap_is_xml(self, onvif_result):
        assert content_extension(onvif_result) == ".xml"
