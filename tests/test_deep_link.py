from autosend.deep_link import build_deep_link, request_launch


class RecordingService:
    def __init__(self, ok=True):
        self.ok = ok
        self.opened = []

    def open_uri(self, uri, package):
        self.opened.append((uri, package))
        return self.ok


def test_build_deep_link_encodes_message():
    url = build_deep_link("9647501234567", "hello world & co?")
    assert url == "https://wa.me/9647501234567?text=hello%20world%20%26%20co%3F"


def test_build_deep_link_keeps_uri_unreserved_marks():
    assert build_deep_link("964", "hi! (ok)*'") == "https://wa.me/964?text=hi!%20(ok)*'"


def test_build_deep_link_encodes_unicode():
    assert build_deep_link("964", "مرحبا").endswith("?text=%D9%85%D8%B1%D8%AD%D8%A8%D8%A7")


def test_request_launch_normalizes_and_targets_whatsapp():
    service = RecordingService()
    assert request_launch(service, "0750 1234567", "hello") is True
    assert service.opened == [("https://wa.me/9647501234567?text=hello", "com.whatsapp")]


def test_request_launch_without_service_fails():
    assert request_launch(None, "0750 1234567", "hello") is False


def test_request_launch_reports_platform_refusal():
    assert request_launch(RecordingService(ok=False), "0750 1234567", "hello") is False
