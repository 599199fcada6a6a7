"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Base form for JSON payloads that reference related
             records by their public UUID.
-------------------------------------------------------------------------
"""
from django import forms


class PublicIdModelForm(forms.ModelForm):
    """
    ModelForm whose relation fields accept and render public_id values.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field in self.fields.values():
            if isinstance(field, forms.ModelChoiceField):
                field.to_field_name = 'public_id'
