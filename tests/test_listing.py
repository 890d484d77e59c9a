# tests/test_listing.py
from quotation_generator.services import customer_service, project_service, quotation_service


def test_customers_are_paginated_ten_per_page(make_customer):
    for _ in range(23):
        make_customer()

    first = customer_service.search_page()
    assert first['total'] == 23
    assert first['pages'] == 3
    assert first['per_page'] == 10
    assert len(first['items']) == 10
    assert first['items'][0]['name'] == 'Customer 23'

    last = customer_service.search_page(page=3)
    assert [c['name'] for c in last['items']] == ['Customer 3', 'Customer 2', 'Customer 1']


def test_page_past_the_end_is_empty(make_customer):
    make_customer()
    result = customer_service.search_page(page=5)
    assert result['items'] == []
    assert result['total'] == 1


def test_customer_search_matches_name_email_and_company(make_customer):
    make_customer(name='Alice Smith')
    make_customer(name='Bob', email='bob@smithworks.io')
    make_customer(name='Carol', company='Smith & Sons')
    make_customer(name='Dave')

    names = {c['name'] for c in customer_service.search_page(search='SMITH')['items']}
    assert names == {'Alice Smith', 'Bob', 'Carol'}
    assert [c.name for c in customer_service.get_all(search='dave')] == ['Dave']


def test_project_filters(make_customer, make_project):
    acme = make_customer(name='Acme')
    globex = make_customer(name='Globex')
    make_project(acme, name='Logo')
    make_project(acme, name='Website', status='completed')
    make_project(globex, name='Brochure', description='Print run')

    assert project_service.search_page(search='acme')['total'] == 2
    assert project_service.search_page(search='print')['items'][0]['name'] == 'Brochure'
    assert [p['name'] for p in project_service.search_page(status='completed')['items']] == ['Website']
    assert project_service.search_page(status='all', customer_id=globex.id)['total'] == 1


def test_quotation_search_by_id_project_and_customer(make_customer, make_project, make_item, make_quotation):
    acme = make_customer(name='Acme')
    logo = make_project(acme, name='Logo')
    site = make_project(make_customer(name='Globex'), name='Website')
    make_item(logo)
    make_item(site)
    first = make_quotation(logo)
    make_quotation(site)
    quotation_service.change_status(first.id, 'sent')

    assert quotation_service.search_page(search='globex')['items'][0]['project_name'] == 'Website'
    assert quotation_service.search_page(search='logo')['items'][0]['customer_name'] == 'Acme'
    assert quotation_service.search_page(status='sent')['items'][0]['id'] == first.id
    assert quotation_service.search_page(project_id=site.id)['total'] == 1
    assert first.id in [q['id'] for q in quotation_service.search_page(search=str(first.id))['items']]


def test_per_page_is_clamped(make_customer):
    for _ in range(3):
        make_customer()
    assert customer_service.search_page(per_page=0)['per_page'] == 1
    assert customer_service.search_page(per_page=1000)['per_page'] == 100
