from pprint import pprint

from tarot_reader.config import load_settings
from tarot_reader.interpret import LocalInterpreter
from tarot_reader.log import setup_logging
from tarot_reader.logic import ReadingController, RecordingRenderer

if __name__ == "__main__":
    settings = load_settings()
    setup_logging(settings.log_level)

    # Example: three-card Past / Present / Future spread
    renderer = RecordingRenderer()
    controller = ReadingController(renderer, LocalInterpreter(settings))
    session = controller.draw("Should I change my career?", "three")
    pprint(session.to_payload() if session else renderer.errors, sort_dicts=False)

    if settings.gemini_token:
        controller.interpret()
        print(renderer.interpretations[-1] if renderer.interpretations else renderer.errors[-1])
