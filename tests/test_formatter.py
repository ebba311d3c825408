from ae_formatter import DEFAULT_TROUBLESHOOTING, ResponseFormatter


def test_success_includes_details_and_warning():
    response = ResponseFormatter.success("Done", {"count": 2}, warning="check this")
    assert response.kind == "success"
    assert not response.is_error
    assert response.text.startswith("✅ Done")
    assert "check this" in response.text
    assert '"count": 2' in response.text


def test_error_without_suggestions_uses_defaults():
    response = ResponseFormatter.error("Boom")
    assert response.is_error
    assert response.suggestions == DEFAULT_TROUBLESHOOTING
    assert "❌ **Error:** Boom" in response.text


def test_error_keeps_given_suggestions():
    response = ResponseFormatter.error("Boom", ["Try again"])
    assert response.suggestions == ["Try again"]
    assert "• Try again" in response.text


def test_queued_command_points_at_get_results():
    response = ResponseFormatter.queued_command("createComposition", {"name": "Intro"})
    assert response.kind == "queued"
    assert "get-results" in response.text
    assert response.data["details"] == {"name": "Intro"}


def test_info_lists_extra_metadata():
    response = ResponseFormatter.info("Title", "Body", {"format": "raw"})
    assert "ℹ️ **Title**" in response.text
    assert "• **format:** raw" in response.text
    assert response.to_mcp()["isError"] is False
    assert response.to_mcp()["content"][0]["type"] == "text"


def test_unserializable_details_fall_back_to_text():
    response = ResponseFormatter.success("Done", {"value": object()})
    assert "result" in response.text


def test_render_result_formats():
    batch = {"status": "success", "totalItems": 2, "successful": 2}
    assert "2/2 items processed successfully" in ResponseFormatter.render_result(batch)
    assert ResponseFormatter.render_result(batch, "raw").startswith("{")
    assert "• status: str" in ResponseFormatter.render_result(batch, "summary")
    assert ResponseFormatter.render_result("plain", "summary") == "Results type: str"
    assert "Debug Information" in ResponseFormatter.render_result(batch, "debug")
