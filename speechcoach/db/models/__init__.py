from speechcoach.db.models.project import Project  # noqa: F401
from speechcoach.db.models.upload import AudioUpload  # noqa: F401
from speechcoach.db.models.speech_analysis import SpeechAnalysis  # noqa: F401
