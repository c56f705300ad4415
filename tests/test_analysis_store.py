from speechcoach.crud.analysis import (
    clear_performance_for_project,
    get_analysis,
    put_analysis,
    to_result,
)
from speechcoach.crud.project import delete_project
from speechcoach.crud.upload import delete_upload
from speechcoach.schemas.analysis import validate_analysis
from speechcoach.services.scoring import score_analysis

from conftest import make_analysis


def _store(db, upload, **overrides):
    payload = validate_analysis(make_analysis(**overrides))
    return put_analysis(db, upload.id, payload, score_analysis(payload, 0))


def test_get_missing(db, upload):
    assert get_analysis(db, upload.id) is None


def test_put_then_get(db, upload):
    _store(db, upload)

    record = get_analysis(db, upload.id)
    result = to_result(record)
    assert result.transcript.startswith("Hello everyone.")
    assert result.gaps[0].type == "long"
    assert result.performance is not None


def test_put_replaces_every_field(db, upload):
    first = _store(db, upload)

    data = make_analysis(transcript="Second take.", gaps=[], averageGapDuration=0, suggestions=[])
    data.pop("timestampedTranscript")
    payload = validate_analysis(data)
    second = put_analysis(db, upload.id, payload, None)

    assert second.id == first.id
    record = get_analysis(db, upload.id)
    assert record.transcript == "Second take."
    assert record.timestamped_transcript is None
    assert record.gaps == []
    assert record.performance is None


def test_clear_performance_for_project(db, project, upload):
    _store(db, upload)

    cleared = clear_performance_for_project(db, project.id)
    db.commit()

    assert cleared == 1
    assert get_analysis(db, upload.id).performance is None


def test_deleting_upload_removes_analysis(db, upload):
    _store(db, upload)
    upload_id = upload.id

    delete_upload(db, upload)

    assert get_analysis(db, upload_id) is None


def test_deleting_project_removes_analysis(db, project, upload):
    _store(db, upload)
    upload_id = upload.id

    delete_project(db, project)

    assert get_analysis(db, upload_id) is None
