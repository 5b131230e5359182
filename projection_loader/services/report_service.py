from datetime import datetime
from html import escape

from projection_loader.domain.dto import BatchReport


EMAIL_STYLES = """
    <style>
        body {
            font-family: "Arial", sans-serif;
            line-height: 1.6;
            background-color: #f9f9f9;
            margin: 0;
        }

        .header {
            background-color: #004080;
            color: #ffffff;
            text-align: center;
            padding: 20px;
        }

        .title {
            font-size: 24px;
            vertical-align: middle;
            margin-left: 10px;
        }

        .content {
            border: 1px solid #cccccc;
            background-color: #ffffff;
            padding: 20px;
            box-shadow: 0 0 10px rgba(0, 0, 0, 0.1);
            border-radius: 5px;
            margin: 20px 0;
        }

        .footer {
            text-align: center;
            padding: 20px;
            color: #888888;
        }

        table {
            width: 100%;
            border-collapse: collapse;
            margin-top: 20px;
        }

        th, td {
            border: 1px solid #cccccc;
            padding: 10px;
            text-align: left;
        }

        th {
            background-color: #f2f2f2;
            font-weight: bold;
        }

        .highlight {
            font-weight: bold;
            color: #004080;
        }
    </style>
"""

EMAIL_TEMPLATE = """
<html>
<head>
    {{styles_email_complete}}
</head>
<body>
    <div class="header">
        <span class="title">AI Forecast Projection Results</span>
    </div>
    <div class="container">
        <div class="content">
            <p class="greeting">Dear <span class="highlight">User</span>,</p>
            <p class="message">The forecasting system has finished this week's projection curve.</p>

            <p><span class="highlight">This is the result:</span></p>
            {{messageResult}}

            <p class="thanks">Thank you for your collaboration.</p>
        </div>
    </div>
    <div class="footer">
        <p class="signature">&copy; {{fullYear}}. All rights reserved.</p>
    </div>
</body>
</html>
"""


class ReportService:
    """Renders the batch report as HTML tables inside the e-mail template."""

    def __init__(self, template: str = EMAIL_TEMPLATE, styles: str = EMAIL_STYLES) -> None:
        self.template = template
        self.styles = styles

    def build_success_table(self, report: BatchReport) -> str:
        rows = "".join(
            f"<tr><td>{escape(entry.provider_code)}</td><td>{escape(entry.fruit_name)}</td></tr>"
            for entry in report.success_responses
        )
        return (
            "<table><thead><tr><th>Provider Code</th><th>Fruit Name</th></tr></thead>"
            f"<tbody>{rows}</tbody></table>"
        )

    def build_failed_table(self, report: BatchReport) -> str:
        rows = "".join(
            f"<tr><td>{escape(entry.provider_code)}</td>"
            f"<td>{escape(entry.message)}</td>"
            f"<td>{escape(entry.error_details)}</td></tr>"
            for entry in report.failed_responses
        )
        return (
            "<table><thead><tr><th>Provider Code</th><th>Message</th><th>Error Details</th></tr></thead>"
            f"<tbody>{rows}</tbody></table>"
        )

    def build_report_content(self, report: BatchReport) -> str:
        """Both tables under their headings, ready for `render_email`."""
        return (
            "<h3>Successful Responses</h3>\n"
            f"{self.build_success_table(report)}\n"
            "<h3>Failed Responses</h3>\n"
            f"{self.build_failed_table(report)}\n"
        )

    def build_failure_content(self, exc: BaseException) -> str:
        return escape(f"Error processing data: {exc}")

    def render_email(self, content: str) -> str:
        return (
            self.template
            .replace("{{styles_email_complete}}", self.styles)
            .replace("{{fullYear}}", str(datetime.now().year))
            .replace("{{messageResult}}", content)
        )
