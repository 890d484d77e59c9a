# tests/test_cascade_delete.py
import pytest
from sqlalchemy.exc import OperationalError

from quotation_generator.errors import NotFoundError
from quotation_generator.models import db, Customer, Project, ServiceItem, Quotation, QuotationItem
from quotation_generator.services import customer_service, project_service, quotation_service


def _counts():
    return {
        'customers': Customer.query.count(),
        'projects': Project.query.count(),
        'service_items': ServiceItem.query.count(),
        'quotations': Quotation.query.count(),
        'quotation_items': QuotationItem.query.count(),
    }


def test_customer_delete_removes_whole_tree(make_customer, make_project, make_item, make_quotation):
    customer = make_customer()
    for p in range(3):
        project = make_project(customer, name=f'Project {p}')
        for i in range(2):
            make_item(project, price=10 * (i + 1), name=f'Item {i}')
        make_quotation(project)

    other = make_customer(name='Untouched')
    other_project = make_project(other)
    make_item(other_project)
    make_quotation(other_project)

    assert customer_service.delete(customer.id) is True

    assert _counts() == {
        'customers': 1,
        'projects': 1,
        'service_items': 1,
        'quotations': 1,
        'quotation_items': 1,
    }
    assert Project.query.one().customer_id == other.id


def test_customer_without_projects(make_customer):
    customer = make_customer()
    customer_service.delete(customer.id)
    assert Customer.query.count() == 0


def test_project_without_dependents(make_project):
    project = make_project()
    project_service.delete(project.id)
    assert Project.query.count() == 0
    assert Customer.query.count() == 1


def test_project_delete_keeps_siblings(make_customer, make_project, make_item, make_quotation):
    customer = make_customer()
    doomed = make_project(customer, name='Doomed')
    kept = make_project(customer, name='Kept')
    make_item(doomed)
    make_item(kept)
    make_quotation(doomed)
    make_quotation(kept)

    project_service.delete(doomed.id)

    assert [p.name for p in Project.query.all()] == ['Kept']
    assert ServiceItem.query.one().project_id == kept.id
    assert Quotation.query.one().project_id == kept.id


def test_deleting_missing_rows_raises_not_found(ctx):
    with pytest.raises(NotFoundError):
        customer_service.delete(999)
    with pytest.raises(NotFoundError):
        project_service.delete(999)
    with pytest.raises(NotFoundError):
        quotation_service.delete(999)


def test_failure_midway_rolls_back_everything(make_project, make_item, make_quotation, monkeypatch):
    project = make_project()
    make_item(project)
    make_quotation(project)
    before = _counts()

    def broken(project_ids):
        raise OperationalError('DELETE FROM quotations', {}, Exception('connection lost'))

    monkeypatch.setattr(quotation_service, 'delete_for_projects', broken)

    with pytest.raises(OperationalError):
        customer_service.delete(project.customer_id)

    db.session.expire_all()
    assert _counts() == before


def test_quotation_delete_removes_line_items(make_project, make_item, make_quotation):
    project = make_project()
    make_item(project)
    make_item(project, name='Second')
    quotation = make_quotation(project)

    quotation_service.delete(quotation.id)

    assert Quotation.query.count() == 0
    assert QuotationItem.query.count() == 0
    assert ServiceItem.query.count() == 2


def test_moving_a_project_moves_its_quotation(make_customer, make_project, make_item, make_quotation):
    old_owner = make_customer(name='Old owner')
    new_owner = make_customer(name='New owner')
    project = make_project(old_owner)
    make_item(project)
    quotation = make_quotation(project)

    project_service.update(project.id, {'customer_id': new_owner.id})

    db.session.expire_all()
    assert db.session.get(Quotation, quotation.id).customer_id == new_owner.id
    assert [q.id for q in quotation_service.get_by_customer_id(new_owner.id)] == [quotation.id]
    assert quotation_service.get_by_customer_id(old_owner.id) == []

    customer_service.delete(old_owner.id)

    db.session.expire_all()
    moved = db.session.get(Quotation, quotation.id)
    assert moved is not None
    assert moved.customer_id == new_owner.id
    assert QuotationItem.query.filter_by(quotation_id=quotation.id).count() == 1


def test_customer_delete_removes_quotations_billed_to_it(make_customer, make_project, make_item, make_quotation):
    customer = make_customer()
    other = make_customer(name='Other')
    project = make_project(other)
    make_item(project)
    quotation = make_quotation(project)

    # Left over from a project that changed hands without its quotation
    Quotation.query.filter_by(id=quotation.id).update({'customer_id': customer.id})
    db.session.commit()

    customer_service.delete(customer.id)

    db.session.expire_all()
    assert Quotation.query.count() == 0
    assert QuotationItem.query.count() == 0
    assert Project.query.count() == 1
