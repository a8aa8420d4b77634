from finance_portal.core.parse_history import ParseHistoryStore


def _result(session_id):
    return {'session_id': session_id, 'summary': {'total_transactions': 3},
            'download_url': f'/download/{session_id}'}


def test_record_newest_first(tmp_path):
    store = ParseHistoryStore(str(tmp_path / 'h.json'))
    store.record(_result('s1'), 'excel', ['a.xlsx'])
    store.record(_result('s2'), 'pdf', ['b.pdf'])

    entries = store.entries()
    assert [e['id'] for e in entries] == ['s2', 's1']
    assert entries[0]['mode'] == 'pdf'
    assert entries[0]['fileNames'] == ['b.pdf']


def test_history_is_capped(tmp_path):
    store = ParseHistoryStore(str(tmp_path / 'h.json'), limit=20)
    for i in range(25):
        store.record(_result(f's{i}'), 'excel', [])

    entries = store.entries()
    assert len(entries) == 20
    assert entries[0]['id'] == 's24'
    assert entries[-1]['id'] == 's5'


def test_duplicate_session_is_not_recorded_twice(tmp_path):
    store = ParseHistoryStore(str(tmp_path / 'h.json'))
    assert store.record(_result('s1'), 'excel', []) is not None
    assert store.record(_result('s1'), 'excel', []) is None
    assert len(store.entries()) == 1


def test_result_without_session_id_is_ignored(tmp_path):
    store = ParseHistoryStore(str(tmp_path / 'h.json'))
    assert store.record({'summary': {}}, 'excel', []) is None
    assert store.entries() == []


def test_corrupt_file_reads_as_empty(tmp_path):
    path = tmp_path / 'h.json'
    path.write_text('{not json')
    assert ParseHistoryStore(str(path)).entries() == []


def test_remove_and_clear(tmp_path):
    store = ParseHistoryStore(str(tmp_path / 'h.json'))
    store.record(_result('s1'), 'excel', [])
    store.record(_result('s2'), 'excel', [])

    assert store.remove('s1') is True
    assert store.remove('missing') is False
    assert [e['id'] for e in store.entries()] == ['s2']

    store.clear()
    assert store.entries() == []
