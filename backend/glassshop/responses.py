from io import BytesIO

from flask import send_file


def pdf_response(filename: str, data: bytes, *, inline: bool = False):
    """download -> attachment, print -> inline so the browser opens its viewer."""
    return send_file(
        BytesIO(data),
        mimetype="application/pdf",
        as_attachment=not inline,
        download_name=filename,
        max_age=0,
    )
