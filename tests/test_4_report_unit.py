from datetime import datetime

import pytest
from botocore.exceptions import ClientError

from projection_loader.domain.dto import BatchReport, EntryFailed, EntrySucceeded, FailedResponse, ForecastInput
from projection_loader.domain.exceptions import NotificationError
from projection_loader.infrastructure.config import EmailConfig
from projection_loader.services.notification_service import NotificationService
from projection_loader.services.report_service import ReportService

from fakes import FakeSesClient


@pytest.fixture
def report() -> BatchReport:
    return BatchReport(
        success_responses=[ForecastInput(provider_code="P1-7", fruit_name="APPLE")],
        failed_responses=[
            FailedResponse(provider_code="P2-3", message="not added", error_details="Forecast service returned 500"),
            FailedResponse(provider_code="P4-1", message="DB operation failed", error_details="<b>duplicate</b>"),
        ],
    )


@pytest.fixture
def email_config() -> EmailConfig:
    return EmailConfig(
        region="us-east-1",
        sender="projection@example.com",
        recipients=["ops@example.com", "sales@example.com"],
        success_subject="Projection load processed correctly",
        failure_subject="Projection load failed",
    )


def test_report_tables(report):
    content = ReportService().build_report_content(report)

    assert content.index("<h3>Successful Responses</h3>") < content.index("<h3>Failed Responses</h3>")
    assert "<th>Provider Code</th><th>Fruit Name</th>" in content
    assert "<tr><td>P1-7</td><td>APPLE</td></tr>" in content
    assert "<th>Provider Code</th><th>Message</th><th>Error Details</th>" in content
    assert "<tr><td>P2-3</td><td>not added</td><td>Forecast service returned 500</td></tr>" in content


def test_report_cells_are_escaped(report):
    table = ReportService().build_failed_table(report)

    assert "&lt;b&gt;duplicate&lt;/b&gt;" in table
    assert "<b>" not in table


def test_empty_report_still_has_both_tables():
    content = ReportService().build_report_content(BatchReport())

    assert content.count("<table>") == 2
    assert content.count("<tbody></tbody>") == 2


def test_render_email_fills_placeholders():
    service = ReportService()
    html = service.render_email(service.build_failure_content(ValueError("No producers with receptions found")))

    assert "{{" not in html
    assert str(datetime.now().year) in html
    assert "Error processing data: No producers with receptions found" in html
    assert "<style>" in html


def test_send_success_email(report, email_config):
    ses = FakeSesClient()
    reporter = ReportService()
    notifier = NotificationService(email_config, reporter, client=ses)

    notifier.send(reporter.build_report_content(report), is_success=True)

    assert len(ses.sent) == 1
    sent = ses.sent[0]
    assert sent["Source"] == "projection@example.com"
    assert sent["Destination"] == {"ToAddresses": ["ops@example.com", "sales@example.com"]}
    assert sent["Message"]["Subject"]["Data"] == "Projection load processed correctly"
    assert "<td>P1-7</td>" in sent["Message"]["Body"]["Html"]["Data"]


def test_send_failure_email_as_text(email_config):
    ses = FakeSesClient()
    notifier = NotificationService(email_config, ReportService(), client=ses)

    notifier.send("Error processing data: boom", is_success=False, is_html=False)

    message = ses.sent[0]["Message"]
    assert message["Subject"]["Data"] == "Projection load failed"
    assert "Text" in message["Body"]
    assert "Error processing data: boom" in message["Body"]["Text"]["Data"]


def test_ses_error_raises_notification_error(email_config):
    error = ClientError({"Error": {"Code": "MessageRejected", "Message": "Email address is not verified"}}, "SendEmail")
    notifier = NotificationService(email_config, ReportService(), client=FakeSesClient(error=error))

    with pytest.raises(NotificationError, match="not verified"):
        notifier.send("body", is_success=True)


def test_report_from_outcomes_keeps_failure_fields():
    failed = EntryFailed(provider_code="P2-3", message="not added", error_details="timeout")
    succeeded = EntrySucceeded(input=ForecastInput(provider_code="P1-7", fruit_name="APPLE"))

    report = BatchReport.from_outcomes([succeeded, failed])

    assert report.success_responses == [succeeded.input]
    assert report.failed_responses == [
        FailedResponse(provider_code="P2-3", message="not added", error_details="timeout")
    ]
    assert type(report.failed_responses[0]) is FailedResponse
