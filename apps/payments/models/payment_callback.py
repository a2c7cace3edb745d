from django.db import models


class PaymentCallback(models.Model):
    """Raw provider callbacks, kept for audit and replay diagnosis"""

    provider = models.CharField(max_length=50, blank=True, default='', help_text="Provider that sent the callback")

    # Request information
    request_method = models.CharField(max_length=10, help_text="HTTP method (GET/POST)")
    request_path = models.CharField(max_length=200, help_text="Request path")
    request_headers = models.JSONField(default=dict, help_text="Request headers")
    request_body = models.TextField(blank=True, help_text="Raw request body")
    request_ip = models.GenericIPAddressField(null=True, blank=True, help_text="Client IP address")

    # Processing information
    processed = models.BooleanField(default=False, help_text="Whether callback was processed successfully")
    duplicate = models.BooleanField(default=False, help_text="Callback for an already settled transaction")
    processing_error = models.TextField(blank=True, help_text="Error message if processing failed")
    transaction_id = models.CharField(max_length=200, blank=True, help_text="Provider transaction ID")

    # Response information
    response_status = models.IntegerField(default=200, help_text="HTTP response status code")
    response_body = models.TextField(blank=True, help_text="Response body sent back")

    received_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'payment_callbacks'
        ordering = ['-received_at']
        indexes = [
            models.Index(fields=['provider']),
            models.Index(fields=['transaction_id']),
            models.Index(fields=['received_at']),
            models.Index(fields=['processed']),
        ]

    def __str__(self):
        return f"Callback {self.provider} {self.transaction_id} - {self.received_at}"
