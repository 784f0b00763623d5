def test_can_create_inspection_row(app, db):
    with app.app_context():
        from inspection_capture.models import ArchiveStatus, Inspection

        inspection = Inspection(product_name="91958CU810JW007", inspector="kim", notes="test")
        db.session.add(inspection)
        db.session.commit()

        stored = db.session.get(Inspection, inspection.id)
        assert stored.product_name == "91958CU810JW007"
        assert stored.archive_status == ArchiveStatus.pending


def test_photos_cascade_with_inspection(app, db):
    with app.app_context():
        from inspection_capture.models import Inspection, InspectionPhoto, PhotoDirection

        inspection = Inspection(product_name="91958PI010", inspector="lee")
        inspection.photos.append(InspectionPhoto(direction=PhotoDirection.front, size_bytes=10))
        inspection.photos.append(InspectionPhoto(direction=PhotoDirection.left, size_bytes=20))
        db.session.add(inspection)
        db.session.commit()
        photo_ids = [photo.id for photo in inspection.photos]

        db.session.delete(inspection)
        db.session.commit()

        assert all(db.session.get(InspectionPhoto, photo_id) is None for photo_id in photo_ids)


def test_scan_capture_links_to_inspection(app, db):
    with app.app_context():
        from inspection_capture.models import Inspection, ScanCapture, ScanSource, Symbology

        capture = ScanCapture(
            source=ScanSource.camera,
            raw_input="91958-PI010",
            symbology=Symbology.qr,
            product_name="91958PI010",
            matched=True,
        )
        db.session.add(capture)
        db.session.flush()
        inspection = Inspection(product_name="91958PI010", inspector="park", scan_id=capture.id)
        db.session.add(inspection)
        db.session.commit()

        assert inspection.scan.raw_input == "91958-PI010"
        assert capture.inspections == [inspection]
