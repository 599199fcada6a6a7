"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: JSON representations of payroll records.
-------------------------------------------------------------------------
"""
from decimal import Decimal
from typing import Any, Dict, Optional

from apps.academics.serializers import reference


def _decimal(value) -> Optional[float]:
    return float(value) if value is not None else None


def _username(user) -> Optional[str]:
    return user.get_username() if user is not None else None


def plain_numbers(value):
    """Turn Decimals inside nested dicts/lists into floats."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {key: plain_numbers(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [plain_numbers(item) for item in value]
    return value


def serialize_rate_setting(rate) -> Dict[str, Any]:
    return {
        'id': str(rate.public_id),
        'code': rate.code,
        'name': rate.name,
        'description': rate.description,
        'academic_year': reference(rate.academic_year),
        'semester': reference(rate.semester),
        'rate_type': rate.rate_type,
        'applicable_scope': rate.applicable_scope,
        'target_model': rate.target_model or None,
        'target_id': str(rate.target_id) if rate.target_id else None,
        'target_code': rate.target_code or None,
        'rate_values': {
            'base_amount': float(rate.base_amount),
            'minimum_rate': _decimal(rate.minimum_rate),
            'maximum_rate': _decimal(rate.maximum_rate),
            'coefficient': float(rate.coefficient),
            'step_increment': float(rate.step_increment),
        },
        'conditions': {
            'minimum_experience': rate.minimum_experience,
            'minimum_hours': float(rate.minimum_hours),
            'maximum_hours': _decimal(rate.maximum_hours),
            'minimum_rating': _decimal(rate.minimum_rating),
            'additional_criteria': rate.additional_criteria,
        },
        'effective_period': {
            'start_date': rate.effective_start,
            'end_date': rate.effective_end,
        },
        'priority': rate.priority,
        'calculation_formula': {
            'formula_type': rate.formula_type,
            'expression': rate.formula_expression,
            'variables': rate.formula_variables,
        },
        'approval': {
            'is_approved': rate.is_approved,
            'approved_by': _username(rate.approved_by),
            'approved_at': rate.approved_at,
            'approval_notes': rate.approval_notes,
        },
        'status': rate.status,
        'version': rate.version,
        'supersedes': str(rate.supersedes.public_id) if rate.supersedes_id else None,
        'superseded_by': str(rate.superseded_by.public_id) if rate.superseded_by_id else None,
        'category': rate.category,
        'tags': rate.tags,
        'notes': rate.notes,
        'is_active': rate.is_active,
        'is_currently_effective': rate.is_currently_effective,
        'effective_rate': float(rate.effective_rate),
        'created_at': rate.created_at,
        'updated_at': rate.updated_at,
    }


def serialize_period_rate(period_rate) -> Dict[str, Any]:
    return {
        'id': str(period_rate.public_id),
        'name': period_rate.name,
        'rate_per_period': float(period_rate.rate_per_period),
        'academic_year': reference(period_rate.academic_year),
        'effective_date': period_rate.effective_date,
        'end_date': period_rate.end_date,
        'description': period_rate.description,
        'approval_status': period_rate.approval_status,
        'approved_by': _username(period_rate.approved_by),
        'approved_at': period_rate.approved_at,
        'is_active': period_rate.is_active,
        'is_currently_active': period_rate.is_currently_active,
    }


def serialize_applied_rate(applied) -> Dict[str, Any]:
    return {
        'rate_setting': {
            'id': str(applied.rate_setting.public_id),
            'code': applied.rate_setting.code,
            'name': applied.rate_setting.name,
        },
        'rate_type': applied.rate_type,
        'rate_amount': float(applied.rate_amount),
        'coefficient': float(applied.coefficient),
        'hours_applied': float(applied.hours_applied),
        'calculated_amount': float(applied.calculated_amount),
    }


def serialize_salary_line(line) -> Dict[str, Any]:
    return {
        'assignment_id': str(line.teaching_assignment.public_id),
        'class': reference(line.course_class),
        'subject': reference(line.subject),
        'assignment_type': line.assignment_type,
        'total_hours': float(line.total_hours),
        'base_hours': float(line.base_hours),
        'overtime_hours': float(line.overtime_hours),
        'applied_rates': [serialize_applied_rate(applied) for applied in line.applied_rates.all()],
        'assignment_total': {
            'base_amount': float(line.base_amount),
            'overtime_amount': float(line.overtime_amount),
            'bonus_amount': float(line.bonus_amount),
            'allowance_amount': float(line.allowance_amount),
            'total_amount': float(line.total_amount),
        },
    }


def serialize_audit_entry(entry) -> Dict[str, Any]:
    return {
        'action': entry.action,
        'performed_by': _username(entry.performed_by),
        'performed_at': entry.performed_at,
        'changes': entry.changes,
        'notes': entry.notes,
    }


def serialize_salary_summary(calculation) -> Dict[str, Any]:
    """List representation without lines and audit trail."""
    return {
        'id': str(calculation.public_id),
        'calculation_code': calculation.calculation_code,
        'teacher': reference(calculation.teacher, 'full_name'),
        'academic_year': reference(calculation.academic_year),
        'semester': reference(calculation.semester),
        'calculation_period': {
            'period_type': calculation.period_type,
            'start_date': calculation.period_start,
            'end_date': calculation.period_end,
            'month': calculation.month,
            'year': calculation.year,
        },
        'total_gross_salary': float(calculation.total_gross_salary),
        'total_net_salary': float(calculation.total_net_salary),
        'status': calculation.status,
        'version': calculation.version,
        'is_active': calculation.is_active,
        'created_at': calculation.created_at,
    }


def serialize_salary(calculation) -> Dict[str, Any]:
    data = serialize_salary_summary(calculation)
    data.update({
        'teaching_assignments': [
            serialize_salary_line(line)
            for line in calculation.lines.select_related(
                'teaching_assignment', 'course_class', 'subject'
            ).prefetch_related('applied_rates__rate_setting')
        ],
        'calculation_results': {
            'total_base_hours': float(calculation.total_base_hours),
            'average_hourly_rate': float(calculation.average_hourly_rate),
            'total_base_amount': float(calculation.total_base_amount),
            'total_overtime_hours': float(calculation.total_overtime_hours),
            'overtime_rate': float(calculation.overtime_rate),
            'total_overtime_amount': float(calculation.total_overtime_amount),
            'total_bonus_amount': float(calculation.total_bonus_amount),
            'total_allowance_amount': float(calculation.total_allowance_amount),
            'total_deduction_amount': float(calculation.total_deduction_amount),
            'total_gross_salary': float(calculation.total_gross_salary),
            'total_net_salary': float(calculation.total_net_salary),
        },
        'coefficients': {
            'degree': {
                'degree': reference(calculation.degree),
                'coefficient': float(calculation.degree_coefficient),
                'applied_amount': float(calculation.degree_applied_amount),
            },
            'position': {
                'position': calculation.position,
                'coefficient': float(calculation.position_coefficient),
                'applied_amount': float(calculation.position_applied_amount),
            },
            'experience': {
                'years_of_service': calculation.years_of_service,
                'coefficient': float(calculation.experience_coefficient),
                'applied_amount': float(calculation.experience_applied_amount),
            },
        },
        'calculation_status': {
            'status': calculation.status,
            'calculated_at': calculation.calculated_at,
            'calculated_by': _username(calculation.calculated_by),
            'approved_at': calculation.approved_at,
            'approved_by': _username(calculation.approved_by),
            'paid_at': calculation.paid_at,
            'paid_by': _username(calculation.paid_by),
            'notes': calculation.status_notes,
        },
        'calculation_metadata': {
            'version': calculation.version,
            'recalculation_count': calculation.recalculation_count,
            'last_recalculated_at': calculation.last_recalculated_at,
            'calculation_method': calculation.calculation_method,
            'data_source': calculation.data_source,
            'validation_errors': calculation.validation_errors,
            'warnings': calculation.warnings,
        },
        'audit_trail': [serialize_audit_entry(entry) for entry in calculation.audit_entries.select_related('performed_by')],
    })
    return data
