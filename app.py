import os
import threading
import uuid

from dotenv import load_dotenv
from flask import Flask, jsonify, render_template, request, session

from medicaid_rag import __version__, logger
from medicaid_rag.config import PipelineConfig
from medicaid_rag.errors import RagError
from medicaid_rag.pipeline import RAGPipeline

load_dotenv()
logger.info("Environment variables loaded", "app.warmup")

if os.environ.get('FLASK_ENV') == 'development':
    logger.set_level(logger.LEVEL_DEBUG)

app = Flask(__name__)
app.secret_key = os.environ.get("SECRET_KEY", "default_secret_key")
logger.info(f"Secret key configured: {'[CUSTOM]' if app.secret_key != 'default_secret_key' else '[DEFAULT]'}", "app.warmup")

GENERIC_ERROR_MESSAGE = "Something went wrong, please try again."

# Kept for the process lifetime only; each browser gets its own chat id
CHAT_HISTORIES = {}
_histories_lock = threading.Lock()

_pipeline = None
_pipeline_lock = threading.Lock()


def get_pipeline():
    """Build the shared pipeline on first use."""
    global _pipeline
    with _pipeline_lock:
        if _pipeline is None:
            logger.info("Initializing RAG pipeline", "app.get_pipeline")
            _pipeline = RAGPipeline(config=PipelineConfig.from_env())
        return _pipeline


def _current_chat_id():
    chat_id = session.get('chat_id')
    if not chat_id:
        chat_id = str(uuid.uuid4())
        session['chat_id'] = chat_id
    return chat_id


def _history_snapshot(chat_id):
    with _histories_lock:
        return list(CHAT_HISTORIES.get(chat_id, []))


def _record_turn(chat_id, message, answer):
    with _histories_lock:
        history = CHAT_HISTORIES.setdefault(chat_id, [])
        history.append(f"User: {message}")
        history.append(f"Assistant: {answer}")


@app.route('/')
def index():
    _current_chat_id()
    return render_template('index.html')


@app.route('/api/chat', methods=['POST'])
def chat():
    """Answer one user message using the transcript of the current chat."""
    data = request.get_json(silent=True) or {}
    message = (data.get('message') or '').strip()
    if not message:
        return jsonify({'error': 'Empty message'}), 400

    chat_id = _current_chat_id()
    history = _history_snapshot(chat_id)
    logger.debug(f"Chat {chat_id}: {len(history)} previous turns", "app.chat")

    try:
        response = get_pipeline().respond(message, history)
    except RagError as e:
        logger.error(f"Error answering chat {chat_id}: {str(e)}", "app.chat")
        return jsonify({'error': GENERIC_ERROR_MESSAGE}), 500

    _record_turn(chat_id, message, response.answer)
    return jsonify({
        'answer': response.answer,
        'chat_id': chat_id,
        'references': response.references,
    })


@app.route('/api/new_chat', methods=['POST'])
def new_chat():
    old_chat_id = session.get('chat_id')
    if old_chat_id:
        with _histories_lock:
            CHAT_HISTORIES.pop(old_chat_id, None)
    chat_id = str(uuid.uuid4())
    session['chat_id'] = chat_id
    return jsonify({'chat_id': chat_id})


@app.route('/api/version', methods=['GET'])
def get_version():
    return jsonify({'version': __version__})


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    logger.info(f"Starting web server on port {port}", "app")
    app.run(host='0.0.0.0', port=port, debug=os.environ.get('FLASK_ENV') == 'development')
