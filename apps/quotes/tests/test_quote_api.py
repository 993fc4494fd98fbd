import pytest
from decimal import Decimal
from uuid import uuid4
from django.urls import reverse
from rest_framework import status
from apps.quotes.models import QuoteAnswer, QuoteStatus


# =============================================================================
# Quote Read Tests
# =============================================================================

@pytest.mark.django_db
class TestQuoteList:
    """Tests for GET /api/quotes/"""

    def test_list_returns_own_quotes(self, customer_client, quote):
        url = reverse('quotes:quote-list')
        response = customer_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['results']) == 1
        assert response.data['results'][0]['quote_number'] == quote.quote_number

    def test_list_excludes_other_customers(self, other_client, quote):
        url = reverse('quotes:quote-list')
        response = other_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['results'] == []

    def test_list_unauthenticated(self, api_client):
        url = reverse('quotes:quote-list')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_retrieve_includes_answers(self, customer_client, quote):
        QuoteAnswer.objects.create(quote=quote, option_key='size', value='large')

        url = reverse('quotes:quote-detail', args=[quote.id])
        response = customer_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['service_name'] == 'Vinyl Banner'
        assert response.data['answers'] == [{'option_key': 'size', 'value': 'large'}]


# =============================================================================
# Answers & Estimate Tests
# =============================================================================

@pytest.mark.django_db
class TestQuoteAnswers:
    """Tests for POST /api/quotes/{id}/answers/"""

    def test_save_answers(self, customer_client, quote, volume_rule):
        url = reverse('quotes:quote-answers', args=[quote.id])
        response = customer_client.post(
            url,
            {'answers': {'size': 'large', 'quantity': 60}},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        # (10 + 200) * 0.9
        assert response.data['estimate_subtotal'] == '189.00'

    def test_empty_answers_rejected(self, customer_client, quote):
        url = reverse('quotes:quote-answers', args=[quote.id])
        response = customer_client.post(url, {'answers': {}}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_blank_option_key_rejected(self, customer_client, quote):
        url = reverse('quotes:quote-answers', args=[quote.id])
        response = customer_client.post(url, {'answers': {'  ': 'x'}}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_converted_quote_rejected(self, customer_client, quote):
        quote.status = QuoteStatus.CONVERTED
        quote.save()

        url = reverse('quotes:quote-answers', args=[quote.id])
        response = customer_client.post(url, {'answers': {'size': 'xl'}}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_other_customer_forbidden(self, other_client, quote):
        url = reverse('quotes:quote-answers', args=[quote.id])
        response = other_client.post(url, {'answers': {'size': 'xl'}}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestQuoteEstimate:
    """Tests for POST /api/quotes/{id}/estimate/"""

    def test_estimate(self, customer_client, quote):
        QuoteAnswer.objects.create(quote=quote, option_key='size', value='xl')

        url = reverse('quotes:quote-estimate', args=[quote.id])
        response = customer_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['quote_id'] == str(quote.id)
        assert response.data['subtotal'] == '25.00'

        quote.refresh_from_db()
        assert quote.estimate_subtotal == Decimal('25.00')

    def test_estimate_not_found(self, customer_client):
        url = reverse('quotes:quote-estimate', args=[uuid4()])
        response = customer_client.post(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_estimate_other_customer(self, other_client, quote):
        url = reverse('quotes:quote-estimate', args=[quote.id])
        response = other_client.post(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN
