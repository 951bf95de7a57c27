from flask import Flask, request, jsonify, Response
import json
import os
import uuid
from werkzeug.utils import secure_filename

from data_extract import (
    ExtractionOptions,
    InvalidStructureError,
    NoEntryFoundError,
    UniversalExtractor,
    UnsupportedFormatError,
    config,
    get_supported_extensions,
)
from data_extract.formats import EXTENSION_MAP
from data_extract.logging_config import get_logger, setup_logging

logger = get_logger(__name__)

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = config.MAX_UPLOAD_MB * 1024 * 1024
app.config['UPLOAD_DIR'] = config.UPLOAD_DIR

extractor = UniversalExtractor()

OPTION_FIELDS = ("limit", "no_headers", "delimiter", "encoding", "archive_target", "columns", "column_mapping")


def save_upload(file) -> str:
    """Save an uploaded file under a unique name, keeping its extension"""
    upload_dir = app.config['UPLOAD_DIR']
    os.makedirs(upload_dir, exist_ok=True)
    filename = secure_filename(file.filename or "") or "upload"
    file_path = os.path.join(upload_dir, f"{uuid.uuid4().hex}_{filename}")
    file.save(file_path)
    return file_path


def remove_upload(file_path: str) -> None:
    try:
        os.remove(file_path)
    except OSError as e:
        logger.error(f"Failed to remove upload {file_path}: {e}")


def parse_request():
    """Return (file, options, error) from a multipart request; error is a response or None"""
    file = request.files.get("file")
    if not file:
        return None, None, (jsonify({"error": "file required"}), 400)

    try:
        options = ExtractionOptions.from_dict({k: request.form.get(k) for k in OPTION_FIELDS})
    except (TypeError, ValueError) as e:
        return None, None, (jsonify({"error": f"Invalid options: {str(e)}"}), 400)

    return file, options, None


def error_response(e: Exception):
    if isinstance(e, UnsupportedFormatError):
        return jsonify({"error": str(e), "extension": e.extension}), 400
    if isinstance(e, NoEntryFoundError):
        return jsonify({"error": str(e)}), 404
    if isinstance(e, InvalidStructureError):
        return jsonify({"error": str(e)}), 422
    if isinstance(e, ValueError):
        return jsonify({"error": str(e)}), 400
    logger.error(f"Extraction failed: {e}", exc_info=True)
    return jsonify({"error": f"Extraction failed: {str(e)}"}), 500


@app.route("/formats", methods=["GET"])
def formats():
    """List supported file extensions and formats"""
    return jsonify({
        "extensions": get_supported_extensions(),
        "formats": sorted({fmt.value for fmt in EXTENSION_MAP.values()})
    })


@app.route("/extract", methods=["POST"])
def extract_file():
    """Upload a data file and return its records"""
    file, options, error = parse_request()
    if error:
        return error

    file_path = save_upload(file)
    try:
        result = extractor.extract_with_details(file_path, options)
        return jsonify(result.to_dict())
    except Exception as e:
        return error_response(e)
    finally:
        remove_upload(file_path)


@app.route("/extract-stream", methods=["POST"])
def extract_file_stream():
    """Upload a data file and stream its records as server-sent events"""
    file, options, error = parse_request()
    if error:
        return error

    file_path = save_upload(file)
    try:
        handle = extractor.extract_as_stream(file_path, options)
    except Exception as e:
        remove_upload(file_path)
        return error_response(e)

    def generate():
        row_count = 0
        try:
            with handle:
                for record in handle:
                    row_count += 1
                    yield f"data: {json.dumps(record, default=str)}\n\n"
            yield f"data: {json.dumps({'done': True, 'row_count': row_count})}\n\n"
        except Exception as e:
            logger.error(f"Streaming failed: {e}", exc_info=True)
            yield f"data: {json.dumps({'error': f'Extraction failed: {str(e)}'})}\n\n"
        finally:
            remove_upload(file_path)

    return Response(generate(), mimetype="text/event-stream")


if __name__ == "__main__":
    setup_logging()
    app.run(debug=True, threaded=True, port=5000)
